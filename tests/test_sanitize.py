"""Tests for reasoning-span removal and placeholder escaping."""
import unittest

from hivemind.sanitize import escape_html, escape_placeholder, strip_reasoning


class TestStripReasoning(unittest.TestCase):
    def test_removes_every_span(self):
        self.assertEqual(strip_reasoning("a<think>x</think>b<think>y</think>c"), "abc")

    def test_spans_are_non_greedy_and_multiline(self):
        text = "<think>line one\nline two</think>Answer\n<think>\nmore\n</think> done"
        self.assertEqual(strip_reasoning(text), "Answer\n done")

    def test_case_insensitive(self):
        self.assertEqual(strip_reasoning("<THINK>hidden</Think>visible"), "visible")

    def test_trims_remainder(self):
        self.assertEqual(strip_reasoning("  <think>x</think>\n\nhello\n  "), "hello")

    def test_empty_input(self):
        self.assertEqual(strip_reasoning(None), "")
        self.assertEqual(strip_reasoning(""), "")
        self.assertEqual(strip_reasoning("<think>only</think>"), "")

    def test_unclosed_span_is_kept(self):
        self.assertEqual(strip_reasoning("<think>never closed"), "<think>never closed")


class TestEscaping(unittest.TestCase):
    def test_escape_html(self):
        self.assertEqual(escape_html('<a href="x">&</a>'), "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;")
        self.assertEqual(escape_html(None), "")

    def test_placeholder_wraps_escaped_text(self):
        self.assertEqual(
            escape_placeholder("<b>hi</b>"),
            '<pre class="raw-response">&lt;b&gt;hi&lt;/b&gt;</pre>',
        )

    def test_placeholder_drops_reasoning(self):
        html = escape_placeholder("<think>plan</think>**bold**")
        self.assertNotIn("plan", html)
        self.assertIn("**bold**", html)


if __name__ == "__main__":
    unittest.main()
