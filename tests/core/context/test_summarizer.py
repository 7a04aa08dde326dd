"""Tests for StructuralSummarizer.

Tests cover:
1. JavaScript-family filter (declarations, imports, function-valued consts)
2. Python filter
3. Generic filter with header and control lines
4. Placeholder for empty input and truncation at the character limit
"""

import pytest

from context_pack.core.context import (
    EMPTY_CONTENT_PLACEHOLDER,
    TRUNCATION_MARKER,
    StructuralSummarizer,
)
from context_pack.core.context.constants import GENERIC_SUMMARY_HEADER

JS_SOURCE = """import { a } from "b";
  export function run() {
const helper = (x) => x;
const value = 42;
const later = async () => {};
  return a;
}
type Id = string;
interface Foo {}
class Bar {}"""

PYTHON_SOURCE = """import os
from typing import Any

@dataclass
class A:
    x: int = 1

    def method(self):
        if self.x:
            return 1

async def main():
    pass
"""

GO_SOURCE = """package main
import "fmt"
func main() {
    if x > 1 {
    for i := 0; i < 3; i++ {
    fmt.Println("hi")
}"""


@pytest.fixture
def summarizer():
    return StructuralSummarizer()


class TestLanguageFilters:
    """Tests for per-language line filters."""

    def test_javascript_family(self, summarizer):
        """Test declaration lines are kept with their original indentation."""
        assert summarizer.summarize(JS_SOURCE, "typescript") == "\n".join(
            [
                'import { a } from "b";',
                "  export function run() {",
                "const helper = (x) => x;",
                "const later = async () => {};",
                "type Id = string;",
                "interface Foo {}",
                "class Bar {}",
            ]
        )

    @pytest.mark.parametrize("language", ["javascript", "js", "tsx", "TypeScript"])
    def test_javascript_aliases_share_filter(self, summarizer, language):
        assert summarizer.summarize("const x = 1;\nexport default x;", language) == (
            "export default x;"
        )

    def test_python(self, summarizer):
        assert summarizer.summarize(PYTHON_SOURCE, "python") == "\n".join(
            [
                "import os",
                "from typing import Any",
                "@dataclass",
                "class A:",
                "    def method(self):",
                "async def main():",
            ]
        )

    def test_generic_keeps_control_headers(self, summarizer):
        assert summarizer.summarize(GO_SOURCE, "go") == GENERIC_SUMMARY_HEADER + "\n".join(
            [
                'import "fmt"',
                "    if x > 1 {",
                "    for i := 0; i < 3; i++ {",
            ]
        )

    def test_generic_markers(self, summarizer):
        text = "var handler = function(e) {\nx++;\nmodule.exports = { a: 1 };"
        assert summarizer.summarize(text) == GENERIC_SUMMARY_HEADER + "var handler = function(e) {"

    def test_no_structure_yields_empty_summary(self, summarizer):
        assert summarizer.summarize("x = 1;\ny = 2;", "typescript") == ""


class TestLimits:
    """Tests for empty input and truncation."""

    @pytest.mark.parametrize("text", [None, ""])
    def test_empty_input_placeholder(self, summarizer, text):
        assert summarizer.summarize(text, "typescript") == EMPTY_CONTENT_PLACEHOLDER

    def test_truncates_long_summary(self, summarizer):
        text = "import x\n" * 300
        full = "\n".join(["import x"] * 300)

        result = summarizer.summarize(text, "python")

        assert result == full[:1000] + TRUNCATION_MARKER
        assert len(result) == 1000 + len(TRUNCATION_MARKER)

    def test_summary_at_limit_not_truncated(self):
        summarizer = StructuralSummarizer(char_limit=10)
        assert summarizer.summarize("import abc\nx = 1", "python") == "import abc"

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            StructuralSummarizer(char_limit=-1)
