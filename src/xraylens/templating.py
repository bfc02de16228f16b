"""Prompt rendering on top of Jinja2.

Templates use plain ``{{ field }}`` placeholders, ``{% if flag %}`` blocks and
a ``{{ media(url) }}`` call that attaches an image to the prompt instead of
inlining it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from jinja2 import Environment, StrictUndefined, TemplateError

from xraylens.errors import TemplateRenderError

_env = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


@dataclass(frozen=True)
class RenderedPrompt:
    """A prompt ready to send: its text plus any attached media URLs."""

    name: str
    text: str
    media: tuple[str, ...] = ()


def render_prompt(
    name: str,
    template_text: str,
    variables: Mapping[str, Any],
) -> RenderedPrompt:
    """Render *template_text* against *variables*.

    Raises ``TemplateRenderError`` for syntax errors or unknown placeholders.
    """
    media: list[str] = []

    def _media(url: str) -> str:
        media.append(url)
        return f"[image {len(media)}]"

    try:
        template = _env.from_string(template_text)
        text = template.render(**variables, media=_media)
    except TemplateError as exc:
        raise TemplateRenderError(
            f"Could not render prompt '{name}': {exc}", prompt_name=name
        ) from exc

    return RenderedPrompt(name=name, text=text, media=tuple(media))
