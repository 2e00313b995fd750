"""Configuration for one generation unit."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ParseError
from .reference import canonical_path


class PropertyName(BaseModel):
    """A (document, schema, property) triple whose type must be boxed."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    schema_name: str
    property_name: str

    @field_validator("file_path")
    @classmethod
    def _canonical(cls, value: str) -> str:
        return canonical_path(value)

    def key(self) -> tuple[str, str, str]:
        return (self.file_path, self.schema_name, self.property_name)


class Config(BaseModel):
    """Inputs, output location and overrides for one run."""

    output_folder: Path
    input_files: list[str] = Field(min_length=1)
    api_version: str | None = None
    # self-referential properties that need indirection; see the Error/innererror pattern
    box_properties: set[PropertyName] = Field(default_factory=set)

    def box_keys(self) -> frozenset[tuple[str, str, str]]:
        return frozenset(p.key() for p in self.box_properties)

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load a config from JSON; box_properties may be given as triples."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as err:
            raise ParseError(str(path), f"invalid JSON at line {err.lineno} column {err.colno}") from err
        if not isinstance(data, dict):
            raise ParseError(str(path), "top level is not an object")
        boxes = data.get("box_properties", [])
        data["box_properties"] = [
            dict(zip(("file_path", "schema_name", "property_name"), b)) if isinstance(b, list) else b
            for b in boxes
        ]
        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise ParseError(str(path), str(err)) from err
