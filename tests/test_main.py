from __future__ import annotations

import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from src.main import main

MINUET_PATH = Path(__file__).resolve().parent / "data" / "minuet.musicxml"


class MainTests(unittest.TestCase):
    def _run(self, *extra: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out):
            code = main([str(MINUET_PATH), *extra])
        return code, out.getvalue()

    def test_prints_tie_aware_plan(self) -> None:
        code, output = self._run()
        self.assertEqual(code, 0)
        self.assertIn("Minuet - 3 measures, 4/4, G major", output)
        self.assertIn("tied: measures 1-2", output)
        self.assertIn("Learning       Measures 1-2", output)
        self.assertNotIn("Measure 1\n", output)
        self.assertRegex(output, r"  total: \d+(\.\d+)? beats\n")

    def test_plain_plan(self) -> None:
        code, output = self._run("--no-ties")
        self.assertEqual(code, 0)
        self.assertIn("Learning       Measure 1\n", output)

    def test_total_beats_line(self) -> None:
        xml = ('<score-partwise><part id="P1"><measure number="1">'
               '<note><pitch><step>C</step><octave>4</octave></pitch><type>whole</type></note>'
               '</measure></part></score-partwise>')
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "whole.musicxml"
            path.write_text(xml, encoding="utf-8")
            out = io.StringIO()
            with redirect_stdout(out):
                code = main([str(path)])
        self.assertEqual(code, 0)
        self.assertIn("  total: 4 beats\n", out.getvalue())

    def test_missing_file(self) -> None:
        self.assertEqual(main(["/nonexistent/piece.musicxml"]), 1)


if __name__ == "__main__":
    unittest.main()
