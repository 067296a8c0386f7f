"""Tests for the markdown renderer adapter."""
import unittest

from hivemind.render import MarkdownRenderer


class TestMarkdownRenderer(unittest.TestCase):
    def setUp(self):
        self.renderer = MarkdownRenderer()

    def test_headings_and_emphasis(self):
        html = self.renderer.render("# Title\n\nSome **bold** text")
        self.assertIn("<h1>Title</h1>", html)
        self.assertIn("<strong>bold</strong>", html)

    def test_no_heading_ids(self):
        self.assertNotIn("id=", self.renderer.render("## Section"))

    def test_tables(self):
        html = self.renderer.render("| a | b |\n|---|---|\n| 1 | 2 |")
        self.assertIn("<table>", html)
        self.assertIn("<td>1</td>", html)

    def test_strikethrough(self):
        self.assertIn("<s>gone</s>", self.renderer.render("~~gone~~"))

    def test_single_newline_is_a_break(self):
        self.assertIn("<br", self.renderer.render("line one\nline two"))

    def test_raw_html_is_escaped(self):
        html = self.renderer.render("<script>alert(1)</script>")
        self.assertNotIn("<script>", html)
        self.assertIn("&lt;script&gt;", html)

    def test_reasoning_is_dropped(self):
        html = self.renderer.render("<think>secret plan</think>Answer")
        self.assertNotIn("secret", html)
        self.assertIn("Answer", html)

    def test_nested_markdown_is_unwrapped(self):
        html = self.renderer.render("```markdown\n# Title\n```")
        self.assertIn("<h1>Title</h1>", html)
        self.assertNotIn("<code", html)

    def test_fenced_code_keeps_language_class(self):
        html = self.renderer.render("```python\nprint(1)\n```")
        self.assertIn('<pre><code class="language-python">print(1)', html)

    def test_placeholder_is_escaped(self):
        self.assertEqual(
            self.renderer.placeholder("<b>hi</b>"),
            '<pre class="raw-response">&lt;b&gt;hi&lt;/b&gt;</pre>',
        )

    def test_smart_quotes(self):
        html = self.renderer.render('She said "quoted" and it\'s done')
        self.assertIn("\u201cquoted\u201d", html)
        self.assertIn("it\u2019s", html)

    def test_typographic_replacements(self):
        self.assertIn("\u00a9", self.renderer.render("(c) 2024"))

    def test_options_disable_typographer(self):
        renderer = MarkdownRenderer({"typographer": False})
        html = renderer.render('"quoted" (c)')
        self.assertNotIn("\u201c", html)
        self.assertIn("&quot;quoted&quot;", html)
        self.assertIn("(c)", html)

    def test_options_disable_breaks(self):
        renderer = MarkdownRenderer({"breaks": False})
        self.assertNotIn("<br", renderer.render("line one\nline two"))


class TestNormalize(unittest.TestCase):
    def test_normalized_content(self):
        renderer = MarkdownRenderer()
        raw = "<think>x</think>```markdown\nIntro\n```"
        content = renderer.normalize(raw)
        self.assertEqual(content.cleaned_text, "Intro")
        self.assertIn("<p>Intro</p>", content.rendered_html)
        self.assertEqual(content.detected_language_tags, ())

    def test_language_tags_from_info_or_classifier(self):
        renderer = MarkdownRenderer()
        raw = "```\nSELECT * FROM users WHERE id = 1\n```\n\n```Python\nx = 1\n```"
        content = renderer.normalize(raw)
        self.assertEqual(content.detected_language_tags, ("sql", "python"))

    def test_empty_output(self):
        content = MarkdownRenderer().normalize(None)
        self.assertEqual(content.cleaned_text, "")
        self.assertEqual(content.rendered_html, "")

    def test_to_dict(self):
        data = MarkdownRenderer().normalize("```bash\nls\n```").to_dict()
        self.assertEqual(data["detectedLanguageTags"], ["bash"])
        self.assertIn("cleanedText", data)
        self.assertIn("renderedHtml", data)


if __name__ == "__main__":
    unittest.main()
