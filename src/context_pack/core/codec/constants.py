"""Constants for the code codec."""

from __future__ import annotations

# =============================================================================
# Language Tags
# =============================================================================

# Short or file-extension tags mapped to canonical language names
LANGUAGE_ALIASES: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "ts": "typescript",
    "py": "python",
}

# =============================================================================
# Tokenization Dictionaries
# =============================================================================

# Keyword/punctuation clusters and their stand-ins, applied in insertion
# order on encode and reversed in the same order on decode. Stand-ins that
# already occur in the source, or that overlap each other ("ɪ" / "ɪᶠ",
# tab / four spaces, "() => {" / parentheses) do not survive a round trip.
_JS_TOKEN_MAP: dict[str, str] = {
    "function": "ƒ",
    "return": "ʀ",
    "const": "ĉ",
    "let": "ļ",
    "var": "ᵛ",
    "import": "ɪ",
    "export": "ɛ",
    "from": "ᶠ",
    "class": "ᶜ",
    "interface": "ɪᶠ",
    "extends": "ᵉˣ",
    "implements": "ɪᵐ",
    "constructor": "ᶜᵗʳ",
    "    ": "\t",
    ": string": ":s",
    ": number": ":n",
    ": boolean": ":b",
    ": void": ":v",
    ": Promise<": ":p<",
    ": Array<": ":a<",
    ": Record<": ":r<",
    "async ": "α ",
    "await ": "ω ",
    "public ": "ᵖ ",
    "private ": "ᵖʳ ",
    "protected ": "ᵖᵗ ",
    "() => {": "()⟹{",
    "() => ": "()→",
    "(": "❨",
    ")": "❩",
    "{": "❴",
    "}": "❵",
    "[": "❲",
    "]": "❳",
}

TOKEN_MAPS: dict[str, dict[str, str]] = {
    "javascript": _JS_TOKEN_MAP,
    "typescript": _JS_TOKEN_MAP,
}

# =============================================================================
# AST Serialization
# =============================================================================

# Node keys removed from serialized syntax trees (positions and comments)
STRIPPED_AST_KEYS = frozenset(
    {
        "loc",
        "range",
        "start",
        "end",
        "leadingComments",
        "trailingComments",
        "lineno",
        "col_offset",
        "end_lineno",
        "end_col_offset",
        "type_comment",
    }
)

# tree-sitter node types dropped from serialized trees
STRIPPED_AST_NODE_TYPES = frozenset({"comment", "html_comment"})

# =============================================================================
# Compression Envelope
# =============================================================================

# Keys of the JSON envelope used when metadata is embedded
ENVELOPE_KEYS = frozenset({"metadata", "code"})
