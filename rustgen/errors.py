"""Errors raised while loading, resolving and generating.

Everything derives from CodegenError so callers can stop a run with a
single except clause. UnknownType is the only one the generator recovers
from: it is caught where a single field, parameter or response is typed
and replaced with a placeholder.
"""

from __future__ import annotations


class CodegenError(Exception):
    """Base class for generation failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        self.location: str | None = None
        super().__init__(message)

    def locate(self, location: str) -> None:
        """Record where the error surfaced, keeping the innermost location."""
        if self.location is None:
            self.location = location

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class DocumentNotFound(CodegenError):
    def __init__(self, path: str, reason: str | None = None) -> None:
        self.path = path
        message = f"document not found: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ParseError(CodegenError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"cannot parse {path}: {reason}")


class ReferenceNotFound(CodegenError):
    def __init__(self, reference: str, path: str) -> None:
        self.reference = reference
        self.path = path
        super().__init__(f"reference {reference!r} not found (from {path})")


class MissingArrayItems(CodegenError):
    def __init__(self, path: str, name: str) -> None:
        self.path = path
        self.name = name
        super().__init__(f"array expected to have items: {name} in {path}")


class UnknownType(CodegenError):
    def __init__(self, path: str, name: str) -> None:
        self.path = path
        self.name = name
        super().__init__(f"UnknownType {path} {name}")
