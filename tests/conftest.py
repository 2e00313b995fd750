"""Shared fixtures: small Swagger documents written to a temp directory.

Tests work on real files so canonical paths and cross-document references
behave the way they do in a run.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Callable

import pytest

from rustgen.loader import DocumentStore
from rustgen.reference import canonical_path
from rustgen.resolver import Resolver


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

PETSTORE: dict[str, Any] = {
    "swagger": "2.0",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "paths": {
        "/pets": {
            "get": {
                "operationId": "Pets_List",
                "parameters": [
                    {"name": "limit", "in": "query", "type": "integer", "format": "int32"},
                    {"$ref": "#/parameters/ApiVersion"},
                ],
                "responses": {
                    "200": {"description": "OK", "schema": {"$ref": "#/definitions/Pets"}},
                    "default": {"description": "Error", "schema": {"$ref": "#/definitions/Error"}},
                },
            },
            "post": {
                "operationId": "Pets_Create",
                "parameters": [
                    {"name": "pet", "in": "body", "required": True, "schema": {"$ref": "#/definitions/Pet"}},
                ],
                "responses": {"201": {"description": "Created"}},
            },
        },
        "/pets/{petId}": {
            "get": {
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "type": "string"},
                ],
                "responses": {"200": {"description": "OK", "schema": {"$ref": "#/definitions/Pet"}}},
            },
        },
    },
    "parameters": {
        "ApiVersion": {"name": "api-version", "in": "query", "required": True, "type": "string"},
    },
    "definitions": {
        "Pet": {
            "type": "object",
            "properties": {
                "id": {"type": "integer", "format": "int32"},
                "name": {"type": "string"},
            },
            "required": ["id"],
        },
        "Pets": {
            "type": "array",
            "items": {"$ref": "#/definitions/Pet"},
        },
        "Widget": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "enum": ["Active", "Inactive"]},
            },
        },
        "Error": {
            "type": "object",
            "properties": {
                "code": {"type": "string"},
                "innererror": {"$ref": "#/definitions/Error"},
            },
        },
    },
}


@pytest.fixture
def petstore() -> dict[str, Any]:
    """A fresh copy of the petstore document, safe to modify."""
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def write_doc(tmp_path: Path) -> Callable[[str, dict[str, Any]], str]:
    """Write a document under tmp_path and return its canonical path."""
    def _write(relative: str, doc: dict[str, Any]) -> str:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(doc), encoding="utf-8")
        return canonical_path(str(path))
    return _write


@pytest.fixture
def make_resolver(write_doc) -> Callable[..., Resolver]:
    """Write documents and return a Resolver over them.

    The first document is the input; the rest are loaded because the first
    one references them (or are passed as extra inputs).
    """
    def _make(docs: dict[str, dict[str, Any]], inputs: list[str] | None = None) -> Resolver:
        paths = {name: write_doc(name, doc) for name, doc in docs.items()}
        names = inputs or [next(iter(docs))]
        store = DocumentStore.read_files([paths[n] for n in names])
        return Resolver(store)
    return _make


@pytest.fixture
def petstore_resolver(make_resolver, petstore) -> Resolver:
    return make_resolver({"petstore.json": petstore})
