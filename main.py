"""logview: browse supervisor log files as structured, filterable, paginated views."""

import json
import logging
import signal
import sys
import threading
from argparse import ArgumentParser

from logview.config import LOG_TYPES, Config
from logview.filters import LogQuery
from logview.formatter import get_formatter
from logview.models import LEVELS, ReadWindow, TailResult
from logview.reader import list_log_files, read_backward, read_forward, tail_lines
from logview.tail import tail_diff
from logview.templates import Template, resolve_template
from logview.watcher import LogFollower

logger = logging.getLogger("logview")


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    target = ArgumentParser(add_help=False)
    target.add_argument("file", nargs="?", help="Log file path")
    target.add_argument("--source", help="Named log source from the config file")
    target.add_argument(
        "--log-type",
        choices=LOG_TYPES,
        default="stdout",
        help="Which log of the source to read (default: stdout)",
    )
    target.add_argument(
        "--template",
        choices=[t.value for t in Template],
        help="Log line format (default: the source's template, else 'default')",
    )
    target.add_argument("--config", help="Path to YAML config (default: $CONFIG_PATH or config.yaml)")
    target.add_argument("--output", choices=["text", "json"], default="text",
                        help="Output format (default: text)")
    target.add_argument("--color", action="store_true", help="Colorize output by log level (ANSI)")
    target.add_argument("-N", "--line-numbers", action="store_true",
                        help="Prefix text output with file line numbers")
    target.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    filters = ArgumentParser(add_help=False)
    filters.add_argument("--search", help="Keep lines containing this text (case-insensitive)")
    filters.add_argument("--level", choices=["all", *LEVELS], default="all",
                         help="Keep entries of this level (default: all)")
    filters.add_argument("--start-date", help="Keep entries on or after this day (YYYY-MM-DD)")
    filters.add_argument("--end-date", help="Keep entries on or before this day (YYYY-MM-DD)")

    parser = ArgumentParser(
        prog="logview",
        description="Browse supervisor log files as structured, filterable, paginated views.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    read = sub.add_parser("read", parents=[target, filters], help="Read a page forward from a line")
    read.add_argument("--start-line", type=int, default=0,
                      help="0-based line index to start from (default: 0)")
    read.add_argument("--max-lines", type=int, help="Page size (default: from config, 500)")

    page = sub.add_parser("page", parents=[target, filters], help="Read a page backward from the end")
    page.add_argument("--limit", type=int, help="Page size (default: from config, 500)")
    page.add_argument("--before-line", type=int,
                      help="Only lines numbered below this (previous page's oldest line)")

    tail = sub.add_parser("tail", parents=[target], help="Show the last N lines")
    tail.add_argument("-n", "--lines", type=int, help="Number of lines (default: from config, 100)")

    diff = sub.add_parser("diff", parents=[target], help="Count lines added since a cursor")
    diff.add_argument("--last-line", type=int, default=0,
                      help="Non-empty line count already seen (default: 0)")
    diff.add_argument("--fetch", action="store_true", help="Also print the new entries")

    follow = sub.add_parser("follow", parents=[target, filters], help="Follow a log file for new entries")
    follow.add_argument("-n", "--lines", type=int, help="Lines to show first (default: from config, 100)")
    follow.add_argument("--poll-interval", type=float, help="Seconds between polls (default: from config, 2)")

    files = sub.add_parser("files", help="List log files (.log, .out, .err) in a directory")
    files.add_argument("path", help="Directory or file")

    return parser


def setup_logging(config: Config, verbose: bool = False):
    log_config = config["logging"]
    level = "DEBUG" if verbose else str(log_config.get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=log_config.get("format"),
        stream=sys.stderr,
    )


def resolve_target(args, config: Config):
    """Return (path, template) for the file or --source the user asked for.

    path is None when the source has no log of the requested type.
    """
    if args.source:
        try:
            source = config.source(args.source)
        except KeyError as e:
            print(f"Error: {e.args[0]}", file=sys.stderr)
            sys.exit(1)
        template = resolve_template(args.template) if args.template else source.template
        return source.path_for(args.log_type), template

    if not args.file:
        print("Error: give a log file path or --source NAME", file=sys.stderr)
        sys.exit(1)
    return args.file, resolve_template(args.template)


def build_query(args) -> LogQuery:
    return LogQuery(
        search=args.search,
        level=args.level,
        start_date=args.start_date,
        end_date=args.end_date,
    )


def print_window(window: ReadWindow, args):
    if args.output == "json":
        print(json.dumps(window.to_dict()))
        return
    formatter = get_formatter(args.output, args.color, args.line_numbers)
    for entry in window.entries:
        print(formatter(entry))
    print(
        f"-- {len(window.entries)} entries, lines {window.oldest_line_loaded}-"
        f"{window.newest_line_loaded} of {window.total_lines}, has_more={window.has_more}",
        file=sys.stderr,
    )


def print_tail_result(result: TailResult, args):
    if args.output == "json":
        print(json.dumps(result.to_dict()))
        return
    print(f"-- {result.new_count} new, {result.total_lines} total", file=sys.stderr)
    formatter = get_formatter(args.output, args.color, args.line_numbers)
    for entry in result.entries or []:
        print(formatter(entry))


def run_follow(path: str, template, args, config: Config):
    """Print the last lines, then stream new entries until interrupted."""
    formatter = get_formatter(args.output, args.color, args.line_numbers)
    count = args.lines if args.lines is not None else config["reader"]["tail_lines"]
    interval = args.poll_interval or config["tail"]["poll_interval"]

    follower = LogFollower(
        path,
        template=template,
        poll_interval=interval,
        callback=lambda entry: print(formatter(entry), flush=True),
        query=build_query(args),
    )
    for entry in follower.prime(count):
        print(formatter(entry), flush=True)

    shutdown = threading.Event()

    def _signal_handler(sig, frame):
        logger.info("Shutdown signal received, stopping...")
        shutdown.set()

    signal.signal(signal.SIGTERM, _signal_handler)
    logger.info("Following %s every %.1fs (template=%s)", path, interval, template.value)
    follower.run(shutdown)


def run_command(args, config: Config):
    if args.command == "files":
        for path in list_log_files(args.path):
            print(path)
        return

    path, template = resolve_target(args, config)
    reader_config = config["reader"]

    if args.command == "read":
        max_lines = args.max_lines if args.max_lines is not None else reader_config["max_lines"]
        window = ReadWindow()
        if path:
            window = read_forward(path, args.start_line, max_lines, build_query(args), template)
        print_window(window, args)

    elif args.command == "page":
        limit = args.limit if args.limit is not None else reader_config["limit"]
        window = ReadWindow()
        if path:
            window = read_backward(path, limit, args.before_line, build_query(args), template)
        print_window(window, args)

    elif args.command == "tail":
        count = args.lines if args.lines is not None else reader_config["tail_lines"]
        formatter = get_formatter(args.output, args.color, args.line_numbers)
        for entry in tail_lines(path, count, template) if path else []:
            print(formatter(entry))

    elif args.command == "diff":
        result = TailResult()
        if path:
            result = tail_diff(path, template, args.last_line, args.fetch)
        print_tail_result(result, args)

    elif args.command == "follow":
        if not path:
            print(f"Error: source has no {args.log_type} log", file=sys.stderr)
            sys.exit(1)
        run_follow(path, template, args, config)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    config = Config.from_env(getattr(args, "config", None))
    setup_logging(config, getattr(args, "verbose", False))
    try:
        run_command(args, config)
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)


if __name__ == "__main__":
    main()
