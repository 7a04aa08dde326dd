"""Syntax tree parsers for the AST codec strategy.

Each parser maps source text to a JSON-serializable tree with position
and comment information removed. Python uses the standard-library ``ast``
module; JavaScript and TypeScript use tree-sitter grammars.

A parser signals failure by raising (``SyntaxError``, ``ValueError``,
``ImportError`` when a grammar is not installed); the codec turns any
such failure into a compression fallback.
"""

from __future__ import annotations

import ast
from functools import lru_cache
from typing import Any, Callable

from .constants import STRIPPED_AST_KEYS, STRIPPED_AST_NODE_TYPES

ParserFunc = Callable[[str], Any]


# =============================================================================
# Python
# =============================================================================


def _python_value(value: Any) -> Any:
    if isinstance(value, ast.AST):
        node: dict[str, Any] = {"type": type(value).__name__}
        for name, field_value in ast.iter_fields(value):
            if name in STRIPPED_AST_KEYS:
                continue
            node[name] = _python_value(field_value)
        return node
    if isinstance(value, list):
        return [_python_value(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    # bytes, complex, Ellipsis constants
    return repr(value)


def parse_python(code: str) -> dict[str, Any]:
    """Parse Python source into a position-free tree.

    Raises:
        SyntaxError: If the source does not parse
    """
    return _python_value(ast.parse(code))


# =============================================================================
# JavaScript / TypeScript (tree-sitter)
# =============================================================================


@lru_cache(maxsize=None)
def _tree_sitter_parser(grammar: str) -> Any:
    """Build (once) a tree-sitter parser for a grammar name."""
    from tree_sitter import Language, Parser

    if grammar == "javascript":
        import tree_sitter_javascript as tsjs

        language = Language(tsjs.language())
    elif grammar == "typescript":
        import tree_sitter_typescript as tsts

        language = Language(tsts.language_typescript())
    else:  # grammar == "tsx"
        import tree_sitter_typescript as tsts

        language = Language(tsts.language_tsx())
    return Parser(language)


def _tree_sitter_node(node: Any) -> Any:
    if node.type in STRIPPED_AST_NODE_TYPES:
        return None
    result: dict[str, Any] = {"type": node.type}
    if node.child_count == 0:
        result["text"] = node.text.decode("utf-8", errors="replace")
        return result
    children = [child for child in map(_tree_sitter_node, node.children) if child is not None]
    if children:
        result["children"] = children
    return result


def _tree_sitter_parse(grammar: str, code: str) -> dict[str, Any]:
    tree = _tree_sitter_parser(grammar).parse(code.encode("utf-8", errors="surrogatepass"))
    root = tree.root_node
    if root.has_error:
        raise ValueError(f"{grammar} source contains syntax errors")
    return _tree_sitter_node(root)


def parse_javascript(code: str) -> dict[str, Any]:
    """Parse JavaScript (including JSX) with tree-sitter."""
    return _tree_sitter_parse("javascript", code)


def parse_typescript(code: str) -> dict[str, Any]:
    """Parse TypeScript with tree-sitter."""
    return _tree_sitter_parse("typescript", code)


def parse_tsx(code: str) -> dict[str, Any]:
    """Parse TSX with tree-sitter."""
    return _tree_sitter_parse("tsx", code)


def default_parsers() -> dict[str, ParserFunc]:
    """Built-in parsers keyed by normalized language name."""
    return {
        "python": parse_python,
        "javascript": parse_javascript,
        "typescript": parse_typescript,
        "tsx": parse_tsx,
    }
