"""Resolve references across the documents of one generation unit.

Every lookup goes through a ReferenceKey: the canonical path of the target
document plus the name inside its definitions, parameters or responses.
Batch resolution only follows each member's own reference; properties and
items are resolved when an emitter asks for them, so a schema that refers
to itself through its properties never sends the resolver into a loop.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .errors import ParseError, ReferenceNotFound
from .loader import DocumentStore
from .reference import Reference, ReferenceKey


@dataclass(frozen=True)
class ResolvedSchema:
    """A schema after following its immediate reference.

    doc_path is the document the schema body lives in; references inside
    the body are relative to it. ref_key is set when the schema was reached
    through a reference.
    """

    doc_path: str
    schema: Mapping[str, Any]
    ref_key: ReferenceKey | None = None

    @property
    def type(self) -> str | None:
        value = self.schema.get("type")
        return value if isinstance(value, str) else None

    @property
    def properties(self) -> Mapping[str, Any]:
        return self.schema.get("properties") or {}

    @property
    def required(self) -> frozenset[str]:
        names = self.properties
        return frozenset(n for n in self.schema.get("required", ()) if n in names)

    @property
    def enum_values(self) -> list[str]:
        # only string constants become enum variants
        return [v for v in self.schema.get("enum", ()) if isinstance(v, str)]

    @property
    def items(self) -> Mapping[str, Any] | None:
        return self.schema.get("items")

    @property
    def all_of(self) -> tuple[Mapping[str, Any], ...]:
        return tuple(self.schema.get("allOf", ()))


@dataclass(frozen=True)
class ResolvedParameter:
    """An operation input after following its reference."""

    name: str
    location: str
    required: bool
    doc_path: str
    raw: Mapping[str, Any]
    schema: ResolvedSchema | None = None

    @property
    def type(self) -> str | None:
        return self.raw.get("type")

    @property
    def collection_format(self) -> str:
        return self.raw.get("collectionFormat", "csv")

    @property
    def items(self) -> Mapping[str, Any] | None:
        return self.raw.get("items")


class Resolver:
    """Reference lookups over a DocumentStore, memoized for the run."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._schemas: dict[ReferenceKey, ResolvedSchema] = {}

    def key_for(self, doc_path: str, ref: str, section: str = "definitions") -> ReferenceKey:
        """Parse a reference seen in doc_path into the key it points at."""
        reference = Reference.parse(ref)
        key = reference.key(doc_path)
        if reference.section != section or key is None:
            raise ParseError(doc_path, f"unsupported reference {ref!r}, expected '#/{section}/Name'")
        return key

    def _get(self, section: str, key: ReferenceKey, ref: str, doc_path: str) -> Mapping[str, Any]:
        doc = self.store.get(key.file_path)
        try:
            body = doc.section(section)[key.name]
        except KeyError:
            raise ReferenceNotFound(ref, doc_path) from None
        if not isinstance(body, Mapping):
            raise ParseError(key.file_path, f"{section}/{key.name} is not an object")
        return body

    def resolve_key(self, key: ReferenceKey, ref: str | None = None, doc_path: str | None = None) -> ResolvedSchema:
        """Resolve a definition key, following chained references."""
        cached = self._schemas.get(key)
        if cached is not None:
            return cached
        body = self._get("definitions", key, ref or str(key), doc_path or key.file_path)
        path = key.file_path
        seen = {key}
        while "$ref" in body:
            next_ref = body["$ref"]
            next_key = self.key_for(path, next_ref)
            if next_key in seen:
                raise ParseError(path, f"reference cycle through {next_ref!r}")
            seen.add(next_key)
            body = self._get("definitions", next_key, next_ref, path)
            path = next_key.file_path
        resolved = ResolvedSchema(path, body, key)
        self._schemas[key] = resolved
        return resolved

    def resolve_schema_ref(self, doc_path: str, ref: str) -> ResolvedSchema:
        return self.resolve_key(self.key_for(doc_path, ref), ref, doc_path)

    def resolve_schema(self, doc_path: str, schema: Mapping[str, Any]) -> ResolvedSchema:
        """Follow the schema's own reference, if it has one."""
        ref = schema.get("$ref")
        if isinstance(ref, str):
            return self.resolve_schema_ref(doc_path, ref)
        return ResolvedSchema(doc_path, schema)

    def resolve_schema_map(
        self, doc_path: str, schemas: Mapping[str, Any],
    ) -> dict[str, ResolvedSchema]:
        """Resolve each member of a named schema map, keeping source order."""
        return {name: self.resolve_schema(doc_path, s) for name, s in schemas.items()}

    def resolve_definitions(self, doc_path: str) -> dict[str, ResolvedSchema]:
        """Resolve every top-level definition of a document."""
        doc = self.store.get(doc_path)
        return {
            name: self.resolve_key(ReferenceKey(doc.path, name))
            for name in doc.definitions
        }

    def resolve_parameter(self, doc_path: str, param: Mapping[str, Any]) -> ResolvedParameter:
        path = doc_path
        ref = param.get("$ref")
        if isinstance(ref, str):
            key = self.key_for(doc_path, ref, "parameters")
            param = self._get("parameters", key, ref, doc_path)
            path = key.file_path
        try:
            name = param["name"]
            location = param["in"]
        except KeyError as err:
            raise ParseError(path, f"parameter without {err.args[0]!r}") from None
        schema = None
        if "schema" in param:
            schema = self.resolve_schema(path, param["schema"])
        required = location == "path" or bool(param.get("required", False))
        return ResolvedParameter(name, location, required, path, param, schema)

    def resolve_parameters(
        self, doc_path: str, params: Iterable[Mapping[str, Any]],
    ) -> list[ResolvedParameter]:
        return [self.resolve_parameter(doc_path, p) for p in params]

    def resolve_response(
        self, doc_path: str, response: Mapping[str, Any],
    ) -> tuple[str, Mapping[str, Any]]:
        """Follow a '#/responses/Name' reference; returns (doc_path, body)."""
        ref = response.get("$ref")
        if isinstance(ref, str):
            key = self.key_for(doc_path, ref, "responses")
            return key.file_path, self._get("responses", key, ref, doc_path)
        return doc_path, response
