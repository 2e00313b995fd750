"""Generate Rust models and client functions from Swagger documents."""

from __future__ import annotations

__version__ = "0.1.0"

from .codegen import GenerationResult, generate, run  # noqa: E402
from .config import Config, PropertyName  # noqa: E402
from .errors import (  # noqa: E402
    CodegenError,
    DocumentNotFound,
    MissingArrayItems,
    ParseError,
    ReferenceNotFound,
    UnknownType,
)

__all__ = [
    "CodegenError",
    "Config",
    "DocumentNotFound",
    "GenerationResult",
    "MissingArrayItems",
    "ParseError",
    "PropertyName",
    "ReferenceNotFound",
    "UnknownType",
    "generate",
    "run",
]
