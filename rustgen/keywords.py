"""Reserved words per target language.

Only the identifier sanitizer reads these tables; retargeting the
generator means adding a table here and a set of templates.
"""

from __future__ import annotations

# https://doc.rust-lang.org/reference/keywords.html, strict and reserved
RUST_KEYWORDS: frozenset[str] = frozenset({
    "abstract", "alignof", "as", "async", "await", "become", "box",
    "break", "const", "continue", "crate", "do", "dyn", "else", "enum",
    "extern", "false", "final", "fn", "for", "if", "impl", "in", "let",
    "loop", "macro", "match", "mod", "move", "mut", "offsetof",
    "override", "priv", "proc", "pub", "pure", "ref", "return", "Self",
    "self", "sizeof", "static", "struct", "super", "trait", "true",
    "try", "type", "typeof", "unsafe", "unsized", "use", "virtual",
    "where", "while", "yield",
})

KEYWORDS: dict[str, frozenset[str]] = {
    "rust": RUST_KEYWORDS,
}

DEFAULT_LANGUAGE = "rust"


def keywords_for(language: str) -> frozenset[str]:
    """Return the reserved-word table for a target language."""
    try:
        return KEYWORDS[language]
    except KeyError:
        raise ValueError(f"no keyword table for target language {language!r}") from None
