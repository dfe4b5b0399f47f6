"""Language tag resolution.

Maps a caller-supplied language tag to the identifier a backend expects.

The primary backend (Pesto) accepts a closed, curated set of language
names and resolution fails closed: anything outside the set resolves to
``None`` and the dispatcher skips Pesto without contacting it.  The
secondary backend (Piston) takes lower-case slugs; a small alias table
covers the command-layer names that differ from Piston's slug, anything
else passes through lower-cased and Piston itself decides.

Both functions are pure.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional

PESTO_LANGUAGES: FrozenSet[str] = frozenset(
    {
        "Brainfuck",
        "C",
        "Cpp",
        "Dart",
        "Go",
        "Java",
        "Javascript",
        "Julia",
        "Lua",
        "Php",
        "Python",
        "Ruby",
        "Rust",
        "Sqlite3",
        "Typescript",
    }
)

PISTON_ALIASES: Dict[str, str] = {
    "c++": "cpp",
    "csharp.net": "csharp",
    "fsharp.net": "fsharp",
    "basic.net": "vbnet",
    "javascript": "js",
    "typescript": "ts",
    "commonlisp": "cl",
}


def resolve_pesto(tag: str) -> Optional[str]:
    """Return the Pesto language name for ``tag`` or ``None`` if unsupported."""
    name = tag.strip().title()
    if name in PESTO_LANGUAGES:
        return name
    return None


def resolve_piston(tag: str, aliases: Optional[Dict[str, str]] = None) -> str:
    """Return the Piston slug for ``tag``.  Never fails."""
    slug = tag.strip().lower()
    table = PISTON_ALIASES if aliases is None else aliases
    return table.get(slug, slug)
