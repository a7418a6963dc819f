"""Driver loop: decode, map, filter and render one event at a time."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import IO, Callable

from jsonlogfmt.config import Config
from jsonlogfmt.decoder import DecodeError, StreamDecoder
from jsonlogfmt.filters import level_filter
from jsonlogfmt.mapper import FieldWarning, Record, map_event

logger = logging.getLogger(__name__)


class DriverState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class RunStats:
    decoded: int = 0
    admitted: int = 0
    dropped: int = 0
    warnings: int = 0


def log_warning(warning: FieldWarning) -> None:
    """Emit a field warning on the diagnostic channel."""
    logger.warning(
        "%s: %s (raw_val=%r raw_type=%s error_key=%s)",
        warning.kind, warning.reason, warning.raw_value,
        warning.raw_type, warning.key,
    )


class Pipeline:
    """Stream transformer from JSON events to rendered lines.

    Each event is mapped, filtered and, if admitted, written to ``out`` and
    flushed before the next event is decoded. Field warnings go to
    ``on_warning`` (the module logger by default) and never stop the run.
    """

    def __init__(
        self,
        config: Config,
        formatter: Callable[[Record], str],
        out: IO[str],
        on_warning: Callable[[FieldWarning], None] = log_warning,
    ):
        self.config = config
        self.formatter = formatter
        self.out = out
        self.on_warning = on_warning
        self.admit = level_filter(config.min_level)
        self.state = DriverState.RUNNING
        self.stats = RunStats()

    def process(self, event: dict) -> str | None:
        """Map and filter a single event. Returns the rendered line or None."""
        record, warnings = map_event(event, self.config.mapping, self.config.time_layout)
        for warning in warnings:
            self.on_warning(warning)
        self.stats.warnings += len(warnings)

        if not self.admit(record):
            self.stats.dropped += 1
            return None
        self.stats.admitted += 1
        return self.formatter(record)

    def run(self, stream: IO) -> RunStats:
        """Consume ``stream`` until end of input.

        Raises DecodeError on malformed JSON; lines written before it stay
        written.
        """
        self.stats = RunStats()
        self.state = DriverState.RUNNING
        try:
            for event in StreamDecoder(stream):
                self.stats.decoded += 1
                line = self.process(event)
                if line is not None:
                    self.out.write(line + "\n")
                    self.out.flush()
        except DecodeError:
            logger.debug("Stopping after %d event(s): malformed input",
                         self.stats.decoded)
            raise
        finally:
            self.state = DriverState.STOPPED

        logger.info("Processed %d event(s): %d shown, %d filtered, %d warning(s)",
                    self.stats.decoded, self.stats.admitted,
                    self.stats.dropped, self.stats.warnings)
        return self.stats
