"""jsonlogfmt: display JSON logs from stdin as human-friendly lines."""

import logging
import sys
from argparse import ArgumentParser

from jsonlogfmt import __version__
from jsonlogfmt.config import (
    VALID_COLORS,
    VALID_FORMATS,
    ConfigError,
    load_config,
    load_yaml_config,
)
from jsonlogfmt.decoder import DecodeError
from jsonlogfmt.formatter import get_formatter
from jsonlogfmt.levels import LEVEL_CHOICES
from jsonlogfmt.pipeline import Pipeline

logger = logging.getLogger("jsonlogfmt")


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser.

    Every option defaults to None so unset flags fall through to the
    environment and the config file.
    """
    parser = ArgumentParser(
        prog="jsonlogfmt",
        description="Display JSON log events from stdin in a human-friendly format.",
    )
    parser.add_argument(
        "-t", "--timekey",
        dest="time_key",
        help="Which JSON key contains the timestamp (default: t)",
    )
    parser.add_argument(
        "-a", "--timelayout",
        dest="time_layout",
        help="Timestamp layout: 'rfc3339' (default) or a strptime format",
    )
    parser.add_argument(
        "-v", "--lvlkey",
        dest="level_key",
        help="Which JSON key contains the level, an integer from 0 (crit) "
             "to 4 (debug) (default: lvl)",
    )
    parser.add_argument(
        "-m", "--msgkey",
        dest="message_key",
        help="Which JSON key contains the message (default: msg)",
    )
    parser.add_argument(
        "-l", "--level",
        dest="min_level",
        choices=LEVEL_CHOICES,
        help="Least severe level to output (default: info)",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=VALID_FORMATS,
        help="Output format; auto uses terminal on a TTY, logfmt otherwise",
    )
    parser.add_argument(
        "--color",
        choices=VALID_COLORS,
        help="Colorize terminal output (default: auto)",
    )
    parser.add_argument(
        "--config",
        help="Path to a YAML config file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug diagnostics to stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None, stdin=None, stdout=None) -> int:
    """Run the tool and return the process exit status."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout

    try:
        config = load_config(args, load_yaml_config(args.config))
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 1
    logger.debug("Config: %s", config)

    formatter = get_formatter(
        output_format=config.output_format,
        color=config.color,
        mapping=config.mapping,
        out=stdout,
    )
    pipeline = Pipeline(config, formatter, stdout)

    try:
        pipeline.run(stdin)
    except DecodeError as exc:
        logger.error("Couldn't decode JSON input: %s", exc)
        return 1
    return 0


def run() -> None:
    """Console-script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)


if __name__ == "__main__":
    run()
