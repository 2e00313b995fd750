"""Render templates and write generated output.

Takes the contexts from models_builder and context_builder and produces
models.rs and operations.rs. Both files are rendered in memory first; they
are only written once both renders succeeded.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
import jinja2

from . import __version__
from .config import Config
from .context_builder import build_context
from .loader import DocumentStore
from .models_builder import build_models_context
from .resolver import Resolver
from .schema_parser import Array, Boxed, Named, Option, Primitive, TypeDescriptor

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

MODELS_FILE = "models.rs"
CLIENT_FILE = "operations.rs"

RUST_PRIMITIVES: dict[str, str] = {
    "int32": "i32",
    "int64": "i64",
    "float32": "f32",
    "float64": "f64",
    "text": "String",
    "text_ref": "&str",
    "bool": "bool",
    "dynamic": "serde_json::Value",
    "unknown": "UnknownType",
}


def rust_type(tp: TypeDescriptor | None) -> str:
    """Rust spelling of a type descriptor; None is the unit type."""
    if tp is None:
        return "()"
    if isinstance(tp, Primitive):
        return RUST_PRIMITIVES[tp.kind]
    if isinstance(tp, Array):
        return f"Vec<{rust_type(tp.item)}>"
    if isinstance(tp, Named):
        return f"{tp.scope}::{tp.name}" if tp.scope else tp.name
    if isinstance(tp, Boxed):
        return f"Box<{rust_type(tp.inner)}>"
    if isinstance(tp, Option):
        return f"Option<{rust_type(tp.inner)}>"
    raise TypeError(f"not a type descriptor: {tp!r}")


def rust_str(text: str) -> str:
    """Quote text as a Rust string literal."""
    out = []
    for ch in text:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\t":
            out.append("\\t")
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{{{ord(ch):x}}}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["rust_type"] = rust_type
    env.filters["rust_str"] = rust_str
    return env


def render(template_name: str, context: dict[str, Any]) -> str:
    return _environment().get_template(template_name).render(**context)


@dataclass(frozen=True)
class GenerationResult:
    models_path: Path
    client_path: Path
    type_count: int
    function_count: int


def _write_outputs(folder: Path, outputs: dict[str, str]) -> list[Path]:
    """Write all outputs or none: stage to temp files, then rename."""
    folder.mkdir(parents=True, exist_ok=True)
    staged: list[tuple[Path, Path]] = []
    try:
        for name, text in outputs.items():
            tmp = folder / f".{name}.tmp"
            tmp.write_text(text, encoding="utf-8")
            staged.append((tmp, folder / name))
    except OSError:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)
        raise
    for tmp, target in staged:
        os.replace(tmp, target)
    return [target for _, target in staged]


def generate(
    resolver: Resolver,
    output_folder: Path,
    api_version: str | None = None,
    box_properties: frozenset[tuple[str, str, str]] = frozenset(),
) -> GenerationResult:
    """Render both artifacts for the loaded documents and write them."""
    models = build_models_context(resolver, box_properties)
    client = build_context(resolver)

    header = {"tool_version": __version__, "api_version": api_version}
    uses_unknown = models["uses_unknown"] or client["uses_unknown"]
    models_rs = render("models.rs.j2", {**models, **header, "uses_unknown": uses_unknown})
    client_rs = render("operations.rs.j2", {**client, **header})

    models_path, client_path = _write_outputs(
        output_folder, {MODELS_FILE: models_rs, CLIENT_FILE: client_rs},
    )
    logger.debug(
        "Generated %s (%d types) and %s (%d functions)",
        models_path, models["type_count"], client_path, client["function_count"],
    )
    return GenerationResult(
        models_path, client_path, models["type_count"], client["function_count"],
    )


def run(config: Config, client: httpx.Client | None = None) -> GenerationResult:
    """Load the configured documents and generate one unit."""
    store = DocumentStore.read_files(config.input_files, client)
    logger.debug("Loaded %d documents for %d inputs", len(store), len(config.input_files))
    return generate(
        Resolver(store),
        config.output_folder,
        api_version=config.api_version,
        box_properties=config.box_keys(),
    )
