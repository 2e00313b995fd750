"""Reference strings and the keys they resolve to.

  "#/definitions/Pet"                 -> local definition
  "common.json#/parameters/ApiVersion" -> parameter in a sibling document
  "../v2/types.json#/definitions/Sku"  -> definition one directory up
"""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from urllib.parse import unquote, urljoin

SECTIONS = ("definitions", "parameters", "responses")


def is_url(path: str) -> bool:
    return path.startswith(("http://", "https://"))


def canonical_path(path: str | os.PathLike[str]) -> str:
    """Canonical identity of a document: normalized path or URL."""
    text = os.fspath(path)
    if is_url(text):
        return text
    return posixpath.normpath(text.replace(os.sep, "/"))


def join_path(doc_path: str, file: str) -> str:
    """Resolve a reference's file component against the referring document."""
    if is_url(doc_path) or is_url(file):
        return urljoin(doc_path, file)
    return canonical_path(posixpath.join(posixpath.dirname(doc_path), file))


@dataclass(frozen=True)
class ReferenceKey:
    """Global identity of a named schema, parameter or response."""

    file_path: str
    name: str

    def __str__(self) -> str:
        return f"{self.file_path}#{self.name}"


@dataclass(frozen=True)
class Reference:
    """A parsed reference string."""

    file: str | None
    pointer: tuple[str, ...]

    @classmethod
    def parse(cls, text: str) -> "Reference":
        file, _, fragment = text.partition("#")
        pointer = tuple(
            unquote(p).replace("~1", "/").replace("~0", "~")
            for p in fragment.split("/") if p
        )
        return cls(file or None, pointer)

    @property
    def section(self) -> str | None:
        if len(self.pointer) == 2 and self.pointer[0] in SECTIONS:
            return self.pointer[0]
        return None

    @property
    def name(self) -> str | None:
        if len(self.pointer) == 2:
            return self.pointer[1]
        return None

    def key(self, doc_path: str) -> ReferenceKey | None:
        """Key of the referenced item, seen from the referring document."""
        if self.name is None:
            return None
        file_path = join_path(doc_path, self.file) if self.file else doc_path
        return ReferenceKey(file_path, self.name)
