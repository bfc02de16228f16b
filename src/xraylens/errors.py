"""Error taxonomy for the X-ray pipeline.

Every fatal error raised by a stage derives from ``XRayLensError`` and is
propagated to the pipeline caller unchanged.
"""

from __future__ import annotations

from typing import Any


class XRayLensError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(XRayLensError, ValueError):
    """A stage input or a model output does not match its declared schema."""

    def __init__(
        self,
        message: str,
        schema: str = "",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.schema = schema
        self.errors = errors or []


class ModelInvocationError(XRayLensError, RuntimeError):
    """The external model capability could not produce a result."""

    def __init__(self, message: str, prompt_name: str = "") -> None:
        super().__init__(message)
        self.prompt_name = prompt_name


class TemplateRenderError(ModelInvocationError):
    """A prompt template could not be rendered against its input."""


class OutputValidationError(ModelInvocationError, ValidationError):
    """The model answered, but the answer does not validate."""

    def __init__(
        self,
        message: str,
        prompt_name: str = "",
        schema: str = "",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        ModelInvocationError.__init__(self, message, prompt_name=prompt_name)
        self.schema = schema
        self.errors = errors or []
