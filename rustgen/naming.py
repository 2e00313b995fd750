"""Turn names found in API documents into target-language identifiers.

Pattern:
  - type-level names (records, enums, variants)  -> UpperCamelCase
  - member-level names (fields, functions, args) -> lower_snake_case
  - characters illegal in identifiers            -> "_"
  - leading digit                                -> "_" prefix
  - reserved word                                -> "_" suffix

Examples:
  type_name("ipConfiguration")  -> "IpConfiguration"
  member_name("odata.nextLink") -> "odata_next_link"
  member_name("type")           -> "type_"
  ident("3.2")                  -> "_3_2"

Whenever the identifier differs from the literal it came from, the literal
is kept next to it (Identifier.rename) so the wire format never depends on
the sanitized spelling.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .keywords import DEFAULT_LANGUAGE, keywords_for

_SEPARATOR_RE = re.compile(r"[^A-Za-z0-9]+")
_ILLEGAL_RE = re.compile(r"[^A-Za-z0-9_]")


@dataclass(frozen=True)
class Identifier:
    """A sanitized identifier and the literal it was derived from."""

    name: str
    original: str

    @property
    def rename(self) -> str | None:
        """The wire literal, only when it differs from the identifier."""
        if self.name == self.original:
            return None
        return self.original


def _split_words(text: str) -> list[str]:
    """Split on non-alphanumerics and on lower/upper case boundaries."""
    words: list[str] = []
    for chunk in _SEPARATOR_RE.split(text):
        if not chunk:
            continue
        s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", chunk)
        s2 = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1)
        words.extend(w for w in s2.split("_") if w)
    return words


def to_snake_case(text: str) -> str:
    """Convert camelCase, PascalCase or dotted names to snake_case."""
    return "_".join(w.lower() for w in _split_words(text))


def to_camel_case(text: str) -> str:
    """Convert any name to UpperCamelCase."""
    return "".join(w[0].upper() + w[1:].lower() for w in _split_words(text))


def ident(text: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Make text a valid, non-reserved identifier without changing its case."""
    name = _ILLEGAL_RE.sub("_", text)
    if not name:
        return "_"
    if name[0].isdigit():
        name = f"_{name}"
    if name in keywords_for(language):
        name = f"{name}_"
    return name


def type_name(text: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Identifier for a type-level name."""
    return ident(to_camel_case(text) or "Empty", language)


def member_name(text: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Identifier for a member-level name."""
    return ident(to_snake_case(text) or "empty", language)


def type_identifier(text: str, language: str = DEFAULT_LANGUAGE) -> Identifier:
    return Identifier(type_name(text, language), text)


def member_identifier(text: str, language: str = DEFAULT_LANGUAGE) -> Identifier:
    return Identifier(member_name(text, language), text)


def deduplicate(identifiers: list[Identifier]) -> list[Identifier]:
    """Make sibling identifiers unique by appending _2, _3, ...

    The first occurrence keeps its name; the original literal is untouched
    so rename metadata still points at the wire name.
    """
    taken = {i.name for i in identifiers}
    seen: set[str] = set()
    result: list[Identifier] = []
    for identifier in identifiers:
        name = identifier.name
        if name in seen:
            n = 2
            while f"{name}_{n}" in taken:
                n += 1
            name = f"{name}_{n}"
            taken.add(name)
        seen.add(name)
        result.append(Identifier(name, identifier.original))
    return result


def build_function_name(
    verb: str, path: str, operation_id: str | None = None,
) -> str:
    """Build a function name for an operation.

    Uses the operationId when present, otherwise joins the literal path
    segments with the verb:

      GET /pets/{petId}          -> pets_get
      PUT /stores/{id}/inventory -> stores_inventory_put
    """
    if operation_id:
        return member_name(operation_id)
    parts = [p for p in path.split("/") if p and not p.startswith("{")]
    parts.append(verb.lower())
    return member_name("_".join(parts))
