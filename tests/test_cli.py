"""Tests for the command line entry points."""
import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from hivemind.cli import build_parser, cmd_evaluate, cmd_render


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp(prefix="hivemind-cli-"))

    def _run(self, func, argv):
        args = build_parser().parse_args(argv)
        out = io.StringIO()
        with redirect_stdout(out), redirect_stderr(io.StringIO()):
            code = func(args)
        return code, out.getvalue()

    def test_evaluate_summary(self):
        path = self.tmp / "results.json"
        path.write_text(json.dumps({
            "queryId": "q9",
            "results": [
                {"model": "A", "output": "x" * 600, "confidence": 0.9, "processingTime": 1000},
                {"model": "B", "error": "down"},
            ],
            "ratings": {"0": "good"},
        }))
        code, out = self._run(cmd_evaluate, ["evaluate", str(path), "--summary"])
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["queryId"], "q9")
        self.assertEqual(data["masterEvaluation"]["bestResponseIndex"], 0)
        self.assertEqual(data["stats"]["successRate"], 50)
        self.assertEqual(data["stats"]["bestModel"], "A")

    def test_evaluate_invalid_input(self):
        path = self.tmp / "bad.json"
        path.write_text('"just a string"')
        code, _ = self._run(cmd_evaluate, ["evaluate", str(path)])
        self.assertEqual(code, 2)

    def test_render_html(self):
        path = self.tmp / "answer.md"
        path.write_text("```markdown\n# Title\n```")
        code, out = self._run(cmd_render, ["render", str(path), "--html"])
        self.assertEqual(code, 0)
        self.assertIn("<h1>Title</h1>", out)


if __name__ == "__main__":
    unittest.main()
