"""
Command-line interface for statement parsing.
"""

import argparse
import codecs
import json
import logging
import sys
from datetime import date
from pathlib import Path

from .category_manager import CategoryStore, InvalidCategoryError
from .csv_parser import StatementParser, StatementParsingError, parse_date
from .models import DateRange, Granularity
from .output_formatter import SummaryFormatter, TransactionFormatter
from .session import DashboardSession
from .storage import JsonFileStorage

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("summary", "transactions", "both")

DEFAULT_CONFIG = {
    "storage_dir": "~/.statementparsing",
    "output_format": "summary",
    "top_vendors": 10,
    "granularity": Granularity.MONTHLY.value,
    "encoding": "utf-8-sig",
    "delimiter": ",",
}


class FileSavingError(Exception):
    """Exception raised when a file cannot be saved."""


def load_config(config_file: str) -> dict:
    """Load CLI configuration from JSON file."""

    config_path = Path(config_file)
    if not config_path.exists():
        logger.debug(f"CLI config file {config_file} does not exist")
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            config = json.load(f)
        logger.debug(f"Loaded CLI config from {config_file}")
    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON in CLI config file {config_file}: {e}")
        return {}
    except OSError as e:
        logger.warning(f"Failed to load CLI config from {config_file}: {e}")
        return {}

    if not isinstance(config, dict):
        logger.warning(f"CLI config file {config_file} must contain a JSON object")
        return {}
    return config


def save_config(config_file: str, config: dict) -> None:
    """Save CLI configuration to JSON file."""
    try:
        config_path = Path(config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2, ensure_ascii=False)
        logger.info(f"CLI configuration saved to {config_file}")
    except OSError as e:
        logger.error(f"Failed to save CLI config to {config_file}: {e}")
        raise FileSavingError(
            f"Failed to save CLI config to {config_file}: {e}",
        ) from e


def _parse_cli_date(parser: argparse.ArgumentParser, value: str | None) -> date | None:
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        parser.error(f"Invalid date '{value}', expected YYYY/MM/DD")
    return parsed


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Parse bank statement CSV exports and summarize spending",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    parser.add_argument(
        "--config",
        help="Path to CLI configuration file (storage_dir, output_format, top_vendors, granularity, encoding, delimiter)",
    )

    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write the default configuration to the --config path and exit",
    )

    parser.add_argument(
        "csv_file",
        nargs="?",
        help="Path to the statement CSV file (optional if only managing categories)",
    )

    parser.add_argument(
        "--start-date",
        help="Start of the spending series range (YYYY/MM/DD format)",
    )

    parser.add_argument(
        "--end-date",
        help="End of the spending series range (YYYY/MM/DD format)",
    )

    parser.add_argument(
        "--granularity",
        choices=[g.value for g in Granularity],
        help="Bucket size of the spending series",
    )

    parser.add_argument(
        "--top",
        type=int,
        help="Number of vendors in the top vendor list",
    )

    parser.add_argument(
        "--set-category",
        nargs=2,
        metavar=("VENDOR", "CATEGORY"),
        help="Assign a category to a vendor and remember it",
    )

    parser.add_argument(
        "--list-categories",
        action="store_true",
        help="List all known categories",
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
    )

    if args.init_config:
        if not args.config:
            parser.error("--init-config requires --config")
        save_config(args.config, DEFAULT_CONFIG)
        return

    config = dict(DEFAULT_CONFIG)
    if args.config:
        config.update(load_config(args.config))

    storage_dir = Path(str(config["storage_dir"])).expanduser()
    category_store = CategoryStore(JsonFileStorage(storage_dir))

    # Handle category management
    if args.set_category:
        vendor, category = args.set_category
        try:
            result = category_store.update(vendor, category)
        except InvalidCategoryError as e:
            logger.error(f"Error: {e}")
            sys.exit(1)
        if not result.ok:
            logger.error(f"Error: category for '{vendor}' could not be saved")
            sys.exit(1)
        logger.info(f"Assigned '{vendor}' to category '{category}'")
        return

    if args.list_categories:
        for category in category_store.all_categories():
            logger.info(category)
        return

    if not args.csv_file:
        parser.error("csv_file is required unless managing categories")

    output_format = config["output_format"]
    if output_format not in OUTPUT_FORMATS:
        logger.error(
            f"Error: output_format must be one of {', '.join(OUTPUT_FORMATS)}, got '{output_format}'",
        )
        sys.exit(1)

    try:
        granularity = Granularity(args.granularity or config["granularity"])
    except ValueError:
        logger.error(f"Error: unknown granularity '{config['granularity']}'")
        sys.exit(1)

    top_vendors = args.top if args.top is not None else config["top_vendors"]
    try:
        top_n = int(top_vendors)
    except (TypeError, ValueError):
        top_n = 0
    if top_n < 1:
        logger.error(f"Error: top_vendors must be a positive integer, got '{top_vendors}'")
        sys.exit(1)

    encoding = config["encoding"]
    try:
        codecs.lookup(encoding)
    except (LookupError, TypeError):
        logger.error(f"Error: unknown encoding '{encoding}'")
        sys.exit(1)

    delimiter = config["delimiter"]
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        logger.error(f"Error: delimiter must be a single character, got '{delimiter}'")
        sys.exit(1)

    start_date = _parse_cli_date(parser, args.start_date)
    end_date = _parse_cli_date(parser, args.end_date)
    date_range = None
    if start_date or end_date:
        date_range = DateRange(start_date or date.min, end_date or date.max)

    session = DashboardSession(
        category_store,
        StatementParser(encoding=encoding, delimiter=delimiter),
    )

    # Parse the CSV file
    try:
        result = session.load_file(args.csv_file)
    except StatementParsingError as e:
        logger.error(f"Error processing file, please check your CSV format: {e}")
        sys.exit(1)

    # Generate output
    outputs_printed = []

    if output_format in ["summary", "both"]:
        summary_output = SummaryFormatter.format_summary(
            result,
            breakdown=session.category_breakdown(),
            vendors=session.top_vendors(top_n),
            series=session.spending_series(granularity, date_range),
        )
        logger.info(summary_output)
        outputs_printed.append("summary")

    if output_format in ["transactions", "both"]:
        if outputs_printed:
            logger.info("\n" + "=" * 50 + "\n")
        transaction_output = TransactionFormatter().format_daily_groups(
            session.daily_groups(),
        )
        logger.info(transaction_output)
        outputs_printed.append("transactions")


if __name__ == "__main__":
    main()
