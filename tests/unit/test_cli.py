"""
Unit tests for the command-line front end.
"""

import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from citeresolve.cli import build_parser, main


REFERENCE_TEXT = (
    "Body text [1].\n"
    "\f"
    "References\n"
    "[1] J. D. Weinstein and N. Isgur, Phys. Rev. D 27, 588 (1983).\n"
    "[2] F.-K. Guo, C. Hanhart, Phys. Rev. D 91, 054017 (2015); M.-T. Li, Phys. Lett. B 740, 100 (2015).\n"
    "[3] A. Smith, arXiv:2301.12345.\n"
    "[4] S. Weinberg, Phys. Rev. Lett. 19, 1264 (1967).\n"
    "[5] ATLAS Collaboration, G. Aad et al., Phys. Lett. B 716, 1 (2012).\n"
)


class TestParser:
    """Test argument parsing."""

    def test_resolve_arguments(self):
        args = build_parser().parse_args(["resolve", "paper.pdf", "--recid", "42", "[3]", "[4-6]"])
        assert args.recid == "42"
        assert args.citations == ["[3]", "[4-6]"]
        assert not args.fuzzy

    def test_resolve_requires_recid(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["resolve", "paper.pdf", "[3]"])


class TestCommands:
    """Test subcommands end to end."""

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_recognize(self, capsys):
        assert main(["recognize", "[1-3]"]) == 0
        out = capsys.readouterr().out
        assert '"labels"' in out
        assert '"3"' in out

    def test_recognize_nothing(self, capsys):
        assert main(["recognize", "the quick brown fox"]) == 1
        assert "No citation recognized" in capsys.readouterr().out

    def test_parse_refs(self, tmp_path, capsys):
        path = tmp_path / "paper.txt"
        path.write_text(REFERENCE_TEXT, encoding="utf-8")
        assert main(["parse-refs", str(path)]) == 0
        out = capsys.readouterr().out
        assert '"total_labels": 5' in out
        assert '"2": 2' in out

    def test_missing_document(self, tmp_path):
        assert main(["parse-refs", str(tmp_path / "missing.txt")]) == 1
