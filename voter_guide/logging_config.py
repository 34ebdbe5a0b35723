"""
Logging setup for the voter guide.

Diagnostics are written to stderr (and optionally a log file) so that the
CLI can print results on stdout.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class VoterGuideLogger:
    """
    Named logger with load and resolution helpers.

    Components that only need to log take the wrapped `logger` attribute; the
    session and output generator use the helpers below.
    """

    def __init__(self, name: str = "voter_guide", level: str = "INFO",
                 log_file: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        handlers = [logging.StreamHandler(sys.stderr)]
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, mode='a', encoding='utf-8'))

        for handler in handlers:
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def info(self, message: str):
        self.logger.info(message)

    def debug(self, message: str):
        self.logger.debug(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def log_load_start(self, data_root: str):
        self.info(f"Loading voter guide data from {data_root} "
                  f"at {datetime.now().strftime(DATE_FORMAT)}")

    def log_load_complete(self, stats):
        """Summarize a bundled load; warn when searches cannot run yet."""
        self.info(
            f"Data load finished in {stats.load_time:.2f}s: "
            f"{stats.ward_entries:,} communities (source: {stats.ward_source or 'none'}), "
            f"{stats.address_entries:,} addresses, {stats.candidates:,} candidates"
        )
        if not stats.is_ready():
            self.warning("Ward index is empty; searches will report that data is not ready")

    def log_source_loaded(self, source: str, location: str, record_count: int):
        self.info(f"Loaded {source}: {location} ({record_count:,} records)")

    def log_resolution(self, result):
        community = f" (community: {result.community})" if result.community else ""
        self.info(
            f"Resolved ward {result.ward} via {result.source.value}{community}: "
            f"{len(result.mayors)} mayor, {len(result.councillors)} councillor, "
            f"{len(result.trustees)} trustee candidates"
        )


def setup_logging(config) -> VoterGuideLogger:
    """Create the application logger from a ResolverConfig."""
    return VoterGuideLogger(level=config.log_level, log_file=config.log_file)
