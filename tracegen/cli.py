"""tracegen CLI: run the integer-set stress workload and emit its trace.

Usage::

    tracegen -n 4 -o 1000 -u 50 2> trace.txt
    tracegen --do-not-alternate --range 1024 --trace-file trace.txt
    python -m tracegen -s 42

The trace goes to stderr unless ``--trace-file`` says otherwise; the
human-readable run summary goes to stdout.  The exit status is non-zero when
the final set size does not match the expected size (1), when the
configuration is invalid (2), or when the run itself failed (3).
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

from tracegen import __version__
from tracegen.common import (
    DEFAULT_INITIAL,
    DEFAULT_NUM_THREADS,
    DEFAULT_OPERATIONS,
    DEFAULT_RANGE,
    DEFAULT_SEED,
    DEFAULT_UPDATE,
    Config,
    ConfigurationError,
    RunResult,
    TraceGenError,
)
from tracegen.driver import run
from tracegen.rand import SeedSource

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SIZE_MISMATCH = 1
EXIT_CONFIG_ERROR = 2
EXIT_RUN_ERROR = 3

LOG_FORMAT = "tracegen: %(levelname)s %(message)s"

HELP_HINT = "Use -h or --help for help"


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad values as :class:`ConfigurationError`."""

    def error(self, message: str):  # type: ignore[override]
        raise ConfigurationError(message)


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog="tracegen",
        description="Integer set stress test: emits a trace of concurrent insert/remove/contains attempts.",
        add_help=False,
    )
    p.add_argument("-h", "--help", action="store_true", help="Print this message")
    p.add_argument(
        "-a",
        "--do-not-alternate",
        dest="alternate",
        action="store_false",
        help="Do not alternate insertions and removals",
    )
    p.add_argument(
        "-o",
        "--operations",
        type=int,
        default=DEFAULT_OPERATIONS,
        metavar="<int>",
        help=f"Number of operations (default={DEFAULT_OPERATIONS})",
    )
    p.add_argument(
        "-i",
        "--initial-size",
        dest="initial",
        type=int,
        default=DEFAULT_INITIAL,
        metavar="<int>",
        help=f"Number of elements to insert before test (default={DEFAULT_INITIAL})",
    )
    p.add_argument(
        "-n",
        "--num-threads",
        type=int,
        default=DEFAULT_NUM_THREADS,
        metavar="<int>",
        help=f"Number of threads (default={DEFAULT_NUM_THREADS})",
    )
    p.add_argument(
        "-r",
        "--range",
        type=int,
        default=DEFAULT_RANGE,
        metavar="<int>",
        help=f"Range of integer values inserted in set (default={DEFAULT_RANGE})",
    )
    p.add_argument(
        "-s",
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        metavar="<int>",
        help=f"RNG seed (0=time-based, default={DEFAULT_SEED})",
    )
    p.add_argument(
        "-u",
        "--update-rate",
        dest="update",
        type=int,
        default=DEFAULT_UPDATE,
        metavar="<int>",
        help=f"Percentage of update transactions (default={DEFAULT_UPDATE})",
    )
    p.add_argument(
        "-t",
        "--trace-file",
        default="-",
        metavar="<path>",
        help="Write the trace to this file instead of stderr ('-' = stderr)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def first_unknown_option(parser: argparse.ArgumentParser, argv: list[str]) -> str | None:
    """Return the first option in *argv* the parser does not know, scanning like getopt.

    Values of known options are skipped, so ``-o -1`` is not reported.  Short
    options may be bundled (``-ab`` checks ``-a`` then ``-b``) and long options
    may be abbreviated to any unique prefix.
    """
    options = parser._option_string_actions
    i = 0
    while i < len(argv):
        arg = argv[i]
        i += 1
        if arg == "--":
            break
        if arg.startswith("--"):
            name, eq, _ = arg.partition("=")
            if name in options:
                action = options[name]
            else:
                matches = [opt for opt in options if opt.startswith("--") and opt.startswith(name)]
                if len(matches) != 1:
                    return name
                action = options[matches[0]]
            if action.nargs != 0 and not eq:
                i += 1
        elif arg.startswith("-") and arg != "-":
            for j, ch in enumerate(arg[1:], start=1):
                action = options.get("-" + ch)
                if action is None:
                    return "-" + ch
                if action.nargs != 0:
                    # The rest of the word, or the next word, is the value
                    if j == len(arg) - 1:
                        i += 1
                    break
    return None


def config_from_args(args: argparse.Namespace) -> Config:
    return Config(
        operations=args.operations,
        initial=args.initial,
        num_threads=args.num_threads,
        range=args.range,
        seed=args.seed,
        update=args.update,
        alternate=args.alternate,
    )


def configure_logging(verbose: bool = False) -> None:
    """Send tracegen's log records to stderr."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


@contextmanager
def _open_trace(path: str) -> Iterator[TextIO]:
    if path == "-":
        yield sys.stderr
        return
    with open(path, "w", encoding="utf-8") as f:
        yield f


def format_summary(result: RunResult) -> list[str]:
    """Render the post-run part of the summary."""
    lines: list[str] = []
    for ctx in result.contexts:
        lines.extend(ctx.describe())
    lines.append(f"Set size      : {result.actual_size} (expected: {result.expected_size})")
    duration_ms = result.duration * 1000.0
    lines.append(f"Duration      : {duration_ms:.0f} (ms)")
    total = result.total_operations
    if result.duration > 0:
        lines.append(f"#txs          : {total} ({total / result.duration:f} / s)")
        lines.append(f"#read txs     : {result.reads} ({result.reads / result.duration:f} / s)")
        lines.append(f"#update txs   : {result.updates} ({result.updates / result.duration:f} / s)")
    else:
        lines.append(f"#txs          : {total}")
        lines.append(f"#read txs     : {result.reads}")
        lines.append(f"#update txs   : {result.updates}")
    return lines


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``tracegen`` CLI command."""
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    unknown = first_unknown_option(parser, argv)
    if unknown is not None:
        print(f"tracegen: unrecognized option {unknown!r}", file=sys.stderr)
        print(HELP_HINT)
        return EXIT_OK

    try:
        args, extras = parser.parse_known_args(argv)
    except ConfigurationError as e:
        print(f"tracegen: {e}", file=sys.stderr)
        print(HELP_HINT)
        return EXIT_CONFIG_ERROR

    if args.help:
        parser.print_help()
        return EXIT_OK

    configure_logging(args.verbose)
    for arg in extras:
        logger.warning("ignoring positional argument %r", arg)

    config = config_from_args(args)
    try:
        config.validate()
    except ConfigurationError as e:
        logger.error("invalid configuration: %s", e)
        return EXIT_CONFIG_ERROR

    # Resolve a time-based seed up front so the summary reports the real one
    seeds = SeedSource(config.seed)
    for line in config.describe():
        print(line)
    if config.seed == 0:
        print(f"Seed (time)  : {seeds.seed}")
    print(f"Adding {config.initial} entries to set")

    try:
        with _open_trace(args.trace_file) as trace_stream:
            result = run(
                config,
                trace_stream,
                seeds=seeds,
                on_populated=lambda size: print(f"Set size     : {size}", flush=True),
            )
    except TraceGenError as e:
        logger.error("%s", e)
        return EXIT_RUN_ERROR
    except OSError as e:
        logger.error("cannot write trace: %s", e)
        return EXIT_RUN_ERROR

    for line in format_summary(result):
        print(line)
    return EXIT_OK if result.consistent else EXIT_SIZE_MISMATCH


if __name__ == "__main__":
    sys.exit(main())
