"""Tests for tool result compaction."""

import json

from zeta_stream.compactor import (
    CITATION_HEADER,
    CompactionPolicy,
    compact_error,
    compact_result,
    format_compact,
    format_full,
)

RESULTS = [
    {"title": f"Title {i}", "url": f"https://example.com/{i}", "text": "x" * 1000}
    for i in range(1, 8)
]


class TestCompactResult:
    def test_compact_respects_limits(self):
        text = compact_result("web_search", {"results": RESULTS}, CompactionPolicy(max_results=3, max_chars=50))
        assert text.startswith(CITATION_HEADER)
        assert "[3] Title 3" in text
        assert "[4]" not in text
        assert "x" * 51 not in text
        assert "URL: https://example.com/1" in text

    def test_full_context_format(self):
        results = [{
            "title": "Paper",
            "url": "https://arxiv.org/abs/1",
            "author": "Ada",
            "publishedDate": "2024-05-01T00:00:00Z",
            "text": "y" * 30,
            "summary": "short",
            "subpages": [{"title": "Sub", "url": "https://arxiv.org/abs/1/s", "text": "z" * 20}],
        }]
        text = compact_result("web_search", {"results": results},
                              CompactionPolicy(max_results=10, max_chars=10, full_context=True, subpage_chars=5))
        assert "**Source [1]:** [Paper](https://arxiv.org/abs/1)" in text
        assert "Author: Ada" in text
        assert "Published: 2024-05-01" in text
        assert "Content: " + "y" * 10 + "..." in text
        assert "Summary: short" in text
        assert "Subpages (1):" in text
        assert "zzzzz..." in text
        assert "AVAILABLE SOURCES:\n[1] https://arxiv.org/abs/1" in text

    def test_empty_results(self):
        assert compact_result("web_search", {"results": []}, CompactionPolicy()) == "No results found."
        full = CompactionPolicy(full_context=True)
        assert compact_result("web_search", {"results": []}, full) == "No search results found."

    def test_answer(self):
        result = {"answer": "42", "citations": [{"title": "Guide", "url": "https://h2g2.com"}]}
        text = compact_result("quick_answer", result, CompactionPolicy())
        assert text == "Answer: 42\nSources:\n- [Guide](https://h2g2.com)"

    def test_creative_writing(self):
        result = {"type": "creative_writing", "title": "Ode", "content": "..."}
        text = compact_result("creative_writing", result, CompactionPolicy())
        assert text.startswith('SUCCESS: The manuscript "Ode"')
        assert "Do NOT repeat" in text

    def test_plain_string_truncated(self):
        policy = CompactionPolicy(max_results=2, max_chars=10)
        assert compact_result("echo", "a" * 100, policy) == "a" * 20

    def test_other_values_serialized(self):
        assert compact_result("x", [1, 2], CompactionPolicy()) == "[1, 2]"


class TestFormatters:
    def test_compact_untitled(self):
        text = format_compact([{"url": "https://a.b"}], CompactionPolicy())
        assert "[1] Untitled\nURL: https://a.b" in text

    def test_full_separator(self):
        text = format_full(RESULTS[:2], CompactionPolicy(full_context=True))
        assert "\n\n---\n\n" in text

    def test_error(self):
        assert json.loads(compact_error("boom")) == {"error": "boom"}
