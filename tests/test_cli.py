"""Tests for the CLI module: arg parsing, exit codes, output formats, end-to-end."""

from __future__ import annotations

import io
import json
from pathlib import Path

from metalex.cli import CliOptions, build_parser, lex_source, main, render_tokens
from metalex.tokens import TokenType


def _options(**overrides) -> CliOptions:
    values = dict(
        input_file=None,
        output_file=None,
        name="t.tmpl",
        output_format="text",
        truncate=10,
        threaded=False,
        debug=False,
    )
    values.update(overrides)
    return CliOptions(**values)


# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_input_only(self) -> None:
        ns = build_parser().parse_args(["page.tmpl"])
        assert ns.input == "page.tmpl"
        assert ns.output is None
        assert ns.format is None
        assert ns.truncate is None
        assert ns.threaded is None

    def test_output_and_format(self) -> None:
        ns = build_parser().parse_args(["page.tmpl", "-o", "out.txt", "--format", "json"])
        assert ns.output == "out.txt"
        assert ns.format == "json"

    def test_truncate_and_threaded(self) -> None:
        ns = build_parser().parse_args(["page.tmpl", "--truncate", "4", "--threaded"])
        assert ns.truncate == 4
        assert ns.threaded is True

    def test_name_and_debug(self) -> None:
        ns = build_parser().parse_args(["page.tmpl", "--name", "oops", "--debug"])
        assert ns.name == "oops"
        assert ns.debug is True


# ---------------------------------------------------------------------------
# Lexing and rendering helpers
# ---------------------------------------------------------------------------


class TestLexSource:
    def test_pull_session(self) -> None:
        tokens = lex_source("a{{b}}", _options())
        assert [t.type for t in tokens][-1] == TokenType.EOF

    def test_threaded_session_matches(self) -> None:
        source = "test a b c {{d e f some_Text}} xxx"
        assert lex_source(source, _options(threaded=True)) == lex_source(source, _options())

    def test_error_token_kept(self) -> None:
        tokens = lex_source("{{abc", _options())
        assert tokens[-1].type == TokenType.ERROR


class TestRenderTokens:
    def test_text_format(self) -> None:
        out = render_tokens(lex_source("a{{b}}c", _options()), _options())
        assert out.splitlines() == [
            't: Text;  v: "a"',
            't: LeftDelim;  v: "{{"',
            't: Identifier;  v: "b"',
            't: RightDelim;  v: "}}"',
            't: Text;  v: "c"',
            "t: EOF",
        ]

    def test_json_format(self) -> None:
        opts = _options(output_format="json")
        records = json.loads(render_tokens(lex_source("x\n{{ привет }}", opts), opts))
        assert records[0] == {"type": "TEXT", "value": "x\n", "line": 1, "column": 1}
        assert records[2] == {"type": "IDENTIFIER", "value": "привет", "line": 2, "column": 4}
        assert records[-1]["type"] == "EOF"


# ---------------------------------------------------------------------------
# Exit codes and end-to-end
# ---------------------------------------------------------------------------


class TestExitCodes:
    def test_success(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "ok.tmpl"
        doc.write_text("Hello {{name}}!", encoding="utf-8")
        assert main([str(doc)]) == 0
        out = capsys.readouterr().out
        assert 't: Identifier;  v: "name"' in out
        assert out.endswith("t: EOF\n")

    def test_lex_error_returns_1(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "bad.tmpl"
        doc.write_text("{{abc", encoding="utf-8")
        assert main([str(doc)]) == 1
        captured = capsys.readouterr()
        assert "t: Error; v: unclosed action" in captured.out
        assert "error: unclosed action" in captured.err
        assert f"{doc}:1:6" in captured.err

    def test_name_used_in_error(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "bad.tmpl"
        doc.write_text("{{a#b}}", encoding="utf-8")
        assert main([str(doc), "--name", "oops"]) == 1
        assert "--> oops:1:4" in capsys.readouterr().err

    def test_missing_input_returns_2(self, tmp_path: Path, capsys) -> None:
        assert main([str(tmp_path / "nope.tmpl")]) == 2
        assert "cannot read" in capsys.readouterr().err

    def test_negative_truncate_returns_2(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "ok.tmpl"
        doc.write_text("x", encoding="utf-8")
        assert main([str(doc), "--truncate", "-1"]) == 2


class TestEndToEnd:
    def test_output_file(self, tmp_path: Path) -> None:
        doc = tmp_path / "page.tmpl"
        doc.write_text("{{x}}", encoding="utf-8")
        out = tmp_path / "tokens.json"
        assert main([str(doc), "--format", "json", "-o", str(out)]) == 0
        records = json.loads(out.read_text(encoding="utf-8"))
        assert [r["type"] for r in records] == ["LEFT_DELIM", "IDENTIFIER", "RIGHT_DELIM", "EOF"]

    def test_stdin(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("{{ a }}"))
        assert main(["-"]) == 0
        assert 't: Identifier;  v: "a"' in capsys.readouterr().out

    def test_stdin_error_name(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("{{ a"))
        assert main(["-"]) == 1
        assert "<stdin>:1:5" in capsys.readouterr().err

    def test_threaded_flag(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "page.tmpl"
        doc.write_text("a{{b}}c", encoding="utf-8")
        assert main([str(doc)]) == 0
        plain = capsys.readouterr().out
        assert main([str(doc), "--threaded"]) == 0
        assert capsys.readouterr().out == plain

    def test_truncate_flag(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "page.tmpl"
        doc.write_text("abcdef", encoding="utf-8")
        assert main([str(doc), "--truncate", "3"]) == 0
        assert 't: Text;  v: "abc"...' in capsys.readouterr().out

    def test_debug_dumps_to_stderr(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "page.tmpl"
        doc.write_text("{{b}}", encoding="utf-8")
        out = tmp_path / "tokens.txt"
        assert main([str(doc), "--debug", "-o", str(out)]) == 0
        err = capsys.readouterr().err
        assert 't: Identifier;  v: "b"' in err
        assert "t: EOF" in out.read_text(encoding="utf-8")
