"""Model capability and the invocation adapter wrapped around it.

The adapter is the single boundary where stage inputs and model outputs are
validated. The capability only knows how to send a rendered prompt to a model
and hand back its raw text.
"""

from __future__ import annotations

import base64
import json
import logging
import re
from pathlib import Path
from typing import Any, Mapping, Protocol, TypeVar
from urllib.parse import unquote_to_bytes

import httpx
import ollama
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from xraylens.config import settings
from xraylens.errors import ModelInvocationError, OutputValidationError, ValidationError
from xraylens.schemas import output_json_schema
from xraylens.templating import RenderedPrompt, render_prompt

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

SYSTEM_RADIOLOGY = (
    "You are a medical imaging assistant AI. You help physicians by analyzing "
    "X-ray images, summarizing radiology findings and highlighting areas of "
    "concern. Use standard medical terminology and always answer with a JSON "
    "object that matches the requested schema."
)


# ---------------------------------------------------------------------------
# Capability
# ---------------------------------------------------------------------------


class ModelCapability(Protocol):
    """Anything that can turn a rendered prompt into raw model text."""

    def complete(self, prompt: RenderedPrompt, output_schema: dict[str, Any]) -> str: ...


def load_image(url: str, timeout: float | None = None) -> str | bytes:
    """Resolve a media reference into something Ollama accepts as an image.

    ``data:`` URLs yield their base64 payload, ``http(s)`` URLs are downloaded
    and anything else is read as a local file.
    """
    if url.startswith("data:"):
        header, sep, payload = url.partition(",")
        if not sep:
            raise ValueError("Malformed data URL: missing ',' separator")
        if header.endswith(";base64"):
            return payload
        return base64.b64encode(unquote_to_bytes(payload)).decode("ascii")

    if url.startswith(("http://", "https://")):
        response = httpx.get(
            url,
            timeout=timeout or settings.request_timeout,
            follow_redirects=True,
        )
        response.raise_for_status()
        return response.content

    return Path(url).read_bytes()


class OllamaCapability:
    """Send prompts to a multimodal model served by Ollama."""

    def __init__(
        self,
        client: ollama.Client | None = None,
        model: str | None = None,
        temperature: float | None = None,
        system_prompt: str = SYSTEM_RADIOLOGY,
    ) -> None:
        self._client = client or ollama.Client(
            host=settings.ollama_base_url,
            timeout=settings.request_timeout,
        )
        self._model = model or settings.ollama_model
        self._temperature = settings.temperature if temperature is None else temperature
        self._system_prompt = system_prompt

    def complete(self, prompt: RenderedPrompt, output_schema: dict[str, Any]) -> str:
        try:
            message: dict[str, Any] = {"role": "user", "content": prompt.text}
            if prompt.media:
                message["images"] = [load_image(url) for url in prompt.media]

            response = self._client.chat(
                model=self._model,
                messages=[
                    {"role": "system", "content": self._system_prompt},
                    message,
                ],
                format=output_schema,
                options={"temperature": self._temperature},
            )
        except ollama.ResponseError as exc:
            raise ModelInvocationError(
                f"Ollama rejected '{prompt.name}' (status {exc.status_code}): {exc.error}",
                prompt_name=prompt.name,
            ) from exc
        except (httpx.HTTPError, ConnectionError, OSError, ValueError) as exc:
            raise ModelInvocationError(
                f"Model call for '{prompt.name}' failed: {exc}",
                prompt_name=prompt.name,
            ) from exc

        content = response["message"]["content"]
        if content is None:
            raise ModelInvocationError(
                f"Ollama returned no content for '{prompt.name}'",
                prompt_name=prompt.name,
            )
        return content


# ---------------------------------------------------------------------------
# Output parsing
# ---------------------------------------------------------------------------


def _extract_json(text: str) -> dict[str, Any]:
    """Best-effort extraction of a JSON object from LLM output."""
    # Try fenced code block first
    match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if match:
        return json.loads(match.group(1))

    # Try raw JSON object
    match = re.search(r"\{.*\}", text, re.DOTALL)
    if match:
        return json.loads(match.group(0))

    raise ValueError(f"Could not extract JSON from LLM response: {text[:200]}")


def parse_json_output(text: str) -> dict[str, Any]:
    """Parse raw model text as a JSON object, tolerating surrounding prose."""
    if not isinstance(text, str):
        raise ValueError(f"Expected model text, got {type(text).__name__}")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = _extract_json(text)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class ModelAdapter:
    """Validate, render, call the model once and validate its answer."""

    def __init__(self, capability: ModelCapability) -> None:
        self._capability = capability

    def invoke(
        self,
        prompt_name: str,
        template_text: str,
        input_schema: type[InputT],
        output_schema: type[OutputT],
        input: InputT | Mapping[str, Any],
    ) -> OutputT:
        validated = validate_input(input_schema, input)
        prompt = render_prompt(prompt_name, template_text, validated.model_dump())

        logger.debug(
            "Invoking prompt '%s' (%d chars, %d media)",
            prompt_name,
            len(prompt.text),
            len(prompt.media),
        )
        try:
            raw = self._capability.complete(prompt, output_json_schema(output_schema))
        except ModelInvocationError:
            raise
        except Exception as exc:
            raise ModelInvocationError(
                f"Model call for '{prompt_name}' failed: {exc}",
                prompt_name=prompt_name,
            ) from exc

        try:
            data = parse_json_output(raw)
        except ValueError as exc:
            raise OutputValidationError(
                f"Prompt '{prompt_name}' returned unparseable output: {exc}",
                prompt_name=prompt_name,
                schema=output_schema.__name__,
            ) from exc

        try:
            output = output_schema.model_validate(data)
        except PydanticValidationError as exc:
            raise OutputValidationError(
                f"Prompt '{prompt_name}' returned output that does not match "
                f"{output_schema.__name__}",
                prompt_name=prompt_name,
                schema=output_schema.__name__,
                errors=exc.errors(),
            ) from exc

        logger.debug("Prompt '%s' returned a valid %s", prompt_name, output_schema.__name__)
        return output


def validate_input(schema: type[InputT], value: BaseModel | Mapping[str, Any]) -> InputT:
    """Coerce *value* into *schema*, raising ``ValidationError`` on mismatch."""
    if isinstance(value, schema):
        return value
    if isinstance(value, BaseModel):
        value = value.model_dump()
    try:
        return schema.model_validate(value)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Input does not match {schema.__name__}",
            schema=schema.__name__,
            errors=exc.errors(),
        ) from exc


def default_adapter() -> ModelAdapter:
    """Build a fresh adapter backed by Ollama with the configured settings."""
    return ModelAdapter(OllamaCapability())
