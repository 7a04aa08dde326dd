"""Constants for context allocation, summarization and rendering."""

from __future__ import annotations

# =============================================================================
# Allocation Constants
# =============================================================================

# Items whose verbatim cost is below this many tokens are included as-is
SMALL_FILE_THRESHOLD = 500

# Default model context size used by the builder
DEFAULT_MAX_TOKENS = 8000

# Recency-ranked filler candidates fetched per build
RECENT_FILE_LIMIT = 10

# Reference line whose token cost stands in for a binary artifact
REFERENCE_TEMPLATE = "REF: {artifact_id}"

# Prefix of content-derived artifact identifiers
ARTIFACT_ID_PREFIX = "sha256:"
ARTIFACT_ID_HEX_LENGTH = 16

# =============================================================================
# Summarizer Constants
# =============================================================================

# Character ceiling for a structural summary before truncation
SUMMARY_CHAR_LIMIT = 1000

# Appended when a summary was cut at SUMMARY_CHAR_LIMIT
TRUNCATION_MARKER = "\n// ... [truncated] ..."

# Returned when an item has no content to summarize
EMPTY_CONTENT_PLACEHOLDER = "[File content not available]"

# First line of summaries built with the generic filter
GENERIC_SUMMARY_HEADER = "// Summary of key structural elements\n"

JS_LIKE_LANGUAGES = frozenset({"javascript", "typescript", "tsx"})

# Line prefixes kept for JavaScript-family sources
JS_STRUCTURE_PREFIXES = (
    "import ",
    "export ",
    "function ",
    "class ",
    "interface ",
    "type ",
)

# A "const" line is kept when it binds one of these function forms
JS_CONST_FUNCTION_MARKERS = (" = function", " = (", " = async")

PYTHON_STRUCTURE_PREFIXES = (
    "import ",
    "from ",
    "class ",
    "def ",
    "async def ",
    "@",
)

GENERIC_STRUCTURE_PREFIXES = (
    "import ",
    "class ",
    "function ",
    "def ",
    "public ",
    "private ",
    "static ",
)

GENERIC_STRUCTURE_MARKERS = (" function(", " class ", " interface ")

GENERIC_CONTROL_PREFIXES = ("if ", "for ", "while ")

# =============================================================================
# Rendering Constants
# =============================================================================

CONTEXT_HEADER = "Repository Context:\n\n"

HISTORY_HEADER = "Previous conversation:\n\n"

CURRENT_REQUEST_HEADER = "Current request:\n"

INSIGHTS_HEADER = "## Historical Context"
