"""Line-based structural summaries of source files.

Keeps declaration and import lines (plus control headers for languages
without a dedicated filter) and drops everything else. A heuristic only:
no parsing, never fails.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from context_pack.core.codec import normalize_language

from .constants import (
    EMPTY_CONTENT_PLACEHOLDER,
    GENERIC_CONTROL_PREFIXES,
    GENERIC_STRUCTURE_MARKERS,
    GENERIC_STRUCTURE_PREFIXES,
    GENERIC_SUMMARY_HEADER,
    JS_CONST_FUNCTION_MARKERS,
    JS_LIKE_LANGUAGES,
    JS_STRUCTURE_PREFIXES,
    PYTHON_STRUCTURE_PREFIXES,
    SUMMARY_CHAR_LIMIT,
    TRUNCATION_MARKER,
)

logger = logging.getLogger(__name__)


def _is_js_structure(stripped: str) -> bool:
    if stripped.startswith(JS_STRUCTURE_PREFIXES):
        return True
    return stripped.startswith("const ") and any(
        marker in stripped for marker in JS_CONST_FUNCTION_MARKERS
    )


def _is_python_structure(stripped: str) -> bool:
    return stripped.startswith(PYTHON_STRUCTURE_PREFIXES)


def _is_generic_structure(stripped: str) -> bool:
    return (
        stripped.startswith(GENERIC_STRUCTURE_PREFIXES)
        or any(marker in stripped for marker in GENERIC_STRUCTURE_MARKERS)
        or stripped.startswith(GENERIC_CONTROL_PREFIXES)
    )


def _filter_lines(text: str, predicate: Callable[[str], bool]) -> str:
    return "\n".join(line for line in text.split("\n") if predicate(line.strip()))


class StructuralSummarizer:
    """Derive a reduced structural view of a file.

    Example:
        summarizer = StructuralSummarizer()
        summarizer.summarize(source, "typescript")
    """

    def __init__(self, char_limit: int = SUMMARY_CHAR_LIMIT):
        if char_limit < 0:
            raise ValueError(f"char_limit must be non-negative, got {char_limit}")
        self.char_limit = char_limit

    def summarize(self, text: Optional[str], language: Optional[str] = None) -> str:
        """Summarize text using the filter for its language.

        JavaScript-family sources keep import/export/declaration lines and
        function-valued consts; Python keeps imports, defs, classes and
        decorators; other languages use a generic filter that also keeps
        control headers and is prefixed by a summary comment.

        Args:
            text: Source text; None or "" yields a fixed placeholder
            language: Language tag (aliases accepted)

        Returns:
            Summary no longer than char_limit plus the truncation marker
        """
        if not text:
            return EMPTY_CONTENT_PLACEHOLDER

        lang = normalize_language(language)
        if lang in JS_LIKE_LANGUAGES:
            summary = _filter_lines(text, _is_js_structure)
        elif lang == "python":
            summary = _filter_lines(text, _is_python_structure)
        else:
            summary = GENERIC_SUMMARY_HEADER + _filter_lines(text, _is_generic_structure)

        if len(summary) > self.char_limit:
            logger.debug(f"Truncating {len(summary)}-char summary to {self.char_limit} chars")
            return summary[: self.char_limit] + TRUNCATION_MARKER
        return summary
