"""Command-line interface for metalex."""

from __future__ import annotations

import argparse
import json
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from metalex.errors import LexError
from metalex.tokens import Token, TokenType

_FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None  # None reads stdin
    output_file: Path | None
    name: str
    output_format: str
    truncate: int
    threaded: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="metalex",
        description="Tokenize {{ action }} templates",
    )
    p.add_argument("input", help="Input template file ('-' for stdin)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument("--name", help="Source name used in error messages (default: input path)")
    p.add_argument(
        "--format",
        choices=_FORMATS,
        default=None,
        help="Token listing format (default: text)",
    )
    p.add_argument(
        "--truncate",
        type=int,
        default=None,
        metavar="N",
        help="Truncate text-format values longer than N characters, 0 disables (default: 10)",
    )
    p.add_argument(
        "--threaded",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run the lexer on a producer thread (default: off)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover metalex.toml)",
    )
    p.add_argument("--debug", action="store_true", help="Dump tokens to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "metalex.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    input_file = None if args.input == "-" else Path(args.input)
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    try:
        config = load_config(config_path, input_dir)
    except tomllib.TOMLDecodeError as exc:
        raise argparse.ArgumentTypeError(f"invalid config file: {exc}") from exc

    cfg_output = config.get("output")
    if not isinstance(cfg_output, dict):
        cfg_output = {}
    cfg_lexer = config.get("lexer")
    if not isinstance(cfg_lexer, dict):
        cfg_lexer = {}

    # Output format: config < CLI
    output_format = "text"
    cfg_format = cfg_output.get("format")
    if cfg_format is not None:
        if cfg_format not in _FORMATS:
            raise argparse.ArgumentTypeError(
                f"invalid output format in config: {cfg_format!r} (expected text or json)"
            )
        output_format = cfg_format
    if args.format is not None:
        output_format = args.format

    # Truncation: config < CLI
    truncate = 10
    cfg_truncate = cfg_output.get("truncate")
    if cfg_truncate is not None:
        if not isinstance(cfg_truncate, int) or isinstance(cfg_truncate, bool):
            raise argparse.ArgumentTypeError(f"invalid truncate in config: {cfg_truncate!r}")
        truncate = cfg_truncate
    if args.truncate is not None:
        truncate = args.truncate
    if truncate < 0:
        raise argparse.ArgumentTypeError(f"truncate must not be negative: {truncate}")

    # Threaded producer: config < CLI
    threaded = False
    cfg_threaded = cfg_lexer.get("threaded")
    if cfg_threaded is not None:
        if not isinstance(cfg_threaded, bool):
            raise argparse.ArgumentTypeError(f"invalid threaded in config: {cfg_threaded!r}")
        threaded = cfg_threaded
    if args.threaded is not None:
        threaded = args.threaded

    if args.name:
        name = args.name
    elif input_file is not None:
        name = str(input_file)
    else:
        name = "<stdin>"

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        name=name,
        output_format=output_format,
        truncate=truncate,
        threaded=threaded,
        debug=args.debug,
    )


def read_source(options: CliOptions) -> str:
    if options.input_file is None:
        return sys.stdin.read()
    return options.input_file.read_text(encoding="utf-8")


def lex_source(source: str, options: CliOptions) -> list[Token]:
    """Run a lexing session over source and collect every token, including an ERROR."""
    from metalex.channel import lex_threaded
    from metalex.lexer import lex

    if options.threaded:
        with lex_threaded(options.name, source) as session:
            return list(session)
    return list(lex(options.name, source))


def render_tokens(tokens: list[Token], options: CliOptions) -> str:
    """Render the token listing in the configured output format."""
    from metalex.debug import format_token

    if options.output_format == "json":
        records = [
            {
                "type": tok.type.name,
                "value": tok.value,
                "line": tok.span.start.line,
                "column": tok.span.start.column,
            }
            for tok in tokens
        ]
        return json.dumps(records, ensure_ascii=False, indent=2) + "\n"
    return "".join(format_token(tok, options.truncate) + "\n" for tok in tokens)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    from metalex.debug import dump_tokens

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        source = read_source(options)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: cannot read {options.name}: {exc}", file=sys.stderr)
        return 2

    tokens = lex_source(source, options)

    if options.debug:
        dump_tokens(tokens, file=sys.stderr, limit=options.truncate)

    output = render_tokens(tokens, options)
    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    if tokens and tokens[-1].type == TokenType.ERROR:
        err = LexError.from_token(tokens[-1], source)
        print(err.format(options.name), file=sys.stderr)
        return 1

    return 0
