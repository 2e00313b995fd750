"""Load and parse Swagger documents.

Reads every input document, then every document they reference, and keeps
them read-only for the rest of the run. Remote documents (http/https) are
fetched with httpx.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import httpx

from .errors import DocumentNotFound, ParseError
from .reference import Reference, canonical_path, is_url, join_path

logger = logging.getLogger(__name__)

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def _freeze(value: Any) -> Any:
    """Wrap nested dicts in read-only proxies; lists become tuples."""
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class Document:
    """One loaded specification file, identified by its canonical path."""

    path: str
    raw: Mapping[str, Any]

    def _section(self, name: str) -> Mapping[str, Any]:
        return self.raw.get(name, _EMPTY)

    @property
    def definitions(self) -> Mapping[str, Any]:
        return self._section("definitions")

    @property
    def paths(self) -> Mapping[str, Any]:
        return self._section("paths")

    def section(self, name: str) -> Mapping[str, Any]:
        return self._section(name)


def iter_refs(node: Any) -> Iterator[str]:
    """Yield every $ref string in a JSON tree, depth first."""
    if isinstance(node, Mapping):
        ref = node.get("$ref")
        if isinstance(ref, str):
            yield ref
        for key, value in node.items():
            if key != "$ref":
                yield from iter_refs(value)
    elif isinstance(node, (list, tuple)):
        for value in node:
            yield from iter_refs(value)


def _read_text(path: str, client: httpx.Client | None) -> str:
    if is_url(path):
        try:
            if client is None:
                response = httpx.get(path, follow_redirects=True, timeout=30.0)
            else:
                response = client.get(path)
            response.raise_for_status()
        except httpx.HTTPError as err:
            raise DocumentNotFound(path, str(err)) from err
        return response.text
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as err:
        raise DocumentNotFound(path) from err
    except OSError as err:
        raise DocumentNotFound(path, err.strerror) from err


def load_document(path: str, client: httpx.Client | None = None) -> Document:
    """Load one document from disk or over HTTP."""
    path = canonical_path(path)
    text = _read_text(path, client)
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as err:
        raise ParseError(path, f"invalid JSON at line {err.lineno} column {err.colno}") from err
    if not isinstance(raw, dict):
        raise ParseError(path, "top level is not an object")
    for section in ("definitions", "parameters", "responses", "paths"):
        if not isinstance(raw.get(section, {}), dict):
            raise ParseError(path, f"'{section}' is not an object")
    return Document(path, _freeze(raw))


class DocumentStore:
    """All documents of one generation unit, in load order.

    Input documents come first, followed by documents discovered through
    cross-document references.
    """

    def __init__(
        self,
        documents: Iterable[Document] = (),
        input_paths: Iterable[str] = (),
    ) -> None:
        self._docs: dict[str, Document] = {}
        for doc in documents:
            self._docs[doc.path] = doc
        self.input_paths = tuple(input_paths)

    @classmethod
    def read_files(
        cls,
        paths: Iterable[str | Path],
        client: httpx.Client | None = None,
    ) -> "DocumentStore":
        inputs = [canonical_path(p) for p in paths]
        store = cls(input_paths=inputs)
        pending = list(inputs)
        while pending:
            path = pending.pop(0)
            if path in store:
                continue
            doc = load_document(path, client)
            store._docs[path] = doc
            logger.debug("Loaded %s", path)
            for ref in iter_refs(doc.raw):
                file = Reference.parse(ref).file
                if file:
                    target = join_path(path, file)
                    if target not in store and target not in pending:
                        pending.append(target)
        return store

    def __contains__(self, path: str) -> bool:
        return path in self._docs

    def __iter__(self) -> Iterator[Document]:
        return iter(self._docs.values())

    def __len__(self) -> int:
        return len(self._docs)

    def get(self, path: str) -> Document:
        """Return a loaded document or raise DocumentNotFound."""
        try:
            return self._docs[path]
        except KeyError:
            raise DocumentNotFound(path, "never loaded") from None

    def inputs(self) -> list[Document]:
        """The documents named as inputs, in the order given."""
        if not self.input_paths:
            return list(self._docs.values())
        return [self._docs[p] for p in self.input_paths]
