#!/usr/bin/env python3
"""Log ingestion tool - entry point."""

import sys
import argparse
import logging

from log_ingest.config import load_yaml_config, load_config
from log_ingest.db import close_store, make_session_factory, open_store
from log_ingest.errors import IngestError
from log_ingest.ingestor import Ingestor

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [log-ingest] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="log-ingest",
        description="Ingest a log file into a SQLite store, one row per matched line.",
    )
    parser.add_argument(
        "--init", action="store_true", default=None,
        help="Recreate the database from empty before running",
    )
    parser.add_argument(
        "--db", dest="db_path", default=None,
        help="Database file (default: tinder.db)",
    )
    parser.add_argument(
        "--config", dest="config_file", default=None,
        help="Path to YAML config file providing option defaults",
    )
    parser.add_argument(
        "--log", dest="log_file", default=None,
        help="Log file to ingest",
    )
    parser.add_argument(
        "--fmt", dest="log_format", default=None,
        help="Line format with ${name} placeholders (default: '[${datetime}] ${msg}')",
    )
    parser.add_argument(
        "--date", dest="date_layout", default=None,
        help="strptime layout of the datetime field (default: '%%Y-%%m-%%d %%H:%%M')",
    )
    parser.add_argument(
        "--compact", action="store_true", default=None,
        help="Do not store the full text of each line",
    )
    parser.add_argument(
        "--relax", action="store_true", default=None,
        help="Don't warn on lines that do not match the format",
    )
    parser.add_argument(
        "--buffer-size", type=int, default=None,
        help="Lines buffered between the file reader and the writer (default: 1024)",
    )
    parser.add_argument(
        "--encoding", default=None,
        help="Log file encoding (default: utf-8)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_cli_parser().parse_args(argv)

    try:
        yaml_data = load_yaml_config(args.config_file)
        config = load_config(args, yaml_data)
        engine = open_store(config.db_path, initialize=config.init)
    except (IngestError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 1

    try:
        if not config.log_file:
            logger.info("No log file given - taking no additional action")
            return 0
        ingestor = Ingestor(make_session_factory(engine), config)
        ingestor.run(config.log_file)
    except (IngestError, ValueError) as e:
        logger.error("%s", e)
        return 1
    finally:
        close_store(engine)
    return 0


if __name__ == "__main__":
    sys.exit(main())
