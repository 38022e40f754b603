import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import colorlog
import polars as pl
import regex
import yaml

from mockquery import __version__

_LOG_FORMAT = "%(log_color)s%(levelname)s:%(name)s: %(message)s"
_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def _log_level(verbose: bool, warnings_only: bool, errors_only: bool) -> int:
    if errors_only:
        return logging.ERROR
    if warnings_only:
        return logging.WARNING
    return logging.DEBUG if verbose else logging.INFO


def setup_logging(
    verbose: bool = False, warnings_only: bool = False, errors_only: bool = False
) -> None:
    """Send colored log records to stderr, keeping stdout for command output."""
    handler = colorlog.StreamHandler(sys.stderr)
    handler.setFormatter(colorlog.ColoredFormatter(_LOG_FORMAT, log_colors=_LOG_COLORS))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_log_level(verbose, warnings_only, errors_only))


def cmd_match(args: argparse.Namespace) -> int:
    """Test a single subject against a LIKE pattern.

    Returns:
        0 if the subject matches
        1 if it does not
        2 if the pattern cannot be compiled
        3 if the match timed out
    """
    from mockquery.core.query import PatternTimeout, like_match

    try:
        matched = like_match(args.subject, args.pattern, getattr(args, "escape", None))
    except PatternTimeout as e:
        logging.error("%s", e)
        return 3
    except regex.error as e:
        logging.error("Invalid LIKE pattern %r: %s", args.pattern, e)
        return 2
    print("true" if matched else "false")
    return 0 if matched else 1


def cmd_translate(args: argparse.Namespace) -> int:
    """Print the regular expression a LIKE pattern translates to."""
    from mockquery.core.query import translate_like_pattern

    print(translate_like_pattern(args.pattern, getattr(args, "escape", None)))
    return 0


def _load_query_file(path: Path) -> Optional[Dict[str, Any]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            query = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logging.error("Failed to read query file %s: %s", path, e)
        return None
    if not isinstance(query, dict):
        logging.error("Query file %s must contain a mapping", path)
        return None
    return query


def cmd_filter(args: argparse.Namespace) -> int:
    """Filter a CSV file with structured filters and write matching rows as CSV.

    Filters come either from a YAML query file (--query) or from a single
    --column/--pattern pair.

    Returns:
        0 on success
        2 on invalid input
        3 if a pattern match timed out
    """
    from mockquery.core.query import PatternTimeout, build_lazy_query, scan_dataset

    query: Dict[str, Any] = {}
    if getattr(args, "query", None):
        loaded = _load_query_file(Path(args.query))
        if loaded is None:
            return 2
        query = loaded
    elif getattr(args, "column", None) and getattr(args, "pattern", None) is not None:
        query["filters"] = [
            {
                "col": args.column,
                "op": "not_like" if getattr(args, "negate", False) else "like",
                "value": args.pattern,
                "escape": getattr(args, "escape", None),
            }
        ]
    else:
        logging.error("Either --query or both --column and --pattern are required")
        return 2

    if getattr(args, "columns", None):
        query["columns"] = [c.strip() for c in args.columns.split(",") if c.strip()]
    if getattr(args, "limit", None):
        query["limit"] = args.limit

    try:
        lf = scan_dataset(Path(args.input))
        lf = build_lazy_query(
            lf,
            columns=query.get("columns"),
            filters=query.get("filters"),
            distinct=bool(query.get("distinct", False)),
            order_by=query.get("order_by"),
            limit=query.get("limit"),
        )
        df = lf.collect()
    except FileNotFoundError as e:
        logging.error("%s", e)
        return 2
    except ValueError as e:
        logging.error("Invalid query: %s", e)
        return 2
    except PatternTimeout as e:
        logging.error("%s", e)
        return 3
    except regex.error as e:
        logging.error("Invalid LIKE pattern: %s", e)
        return 2
    except pl.exceptions.PolarsError as e:
        # Errors raised inside map_elements may surface wrapped by Polars
        if isinstance(e.__cause__, PatternTimeout):
            logging.error("%s", e.__cause__)
            return 3
        logging.error("Query failed: %s", e)
        return 2

    logging.info("Matched %d rows from %s", df.height, args.input)
    sys.stdout.write(df.write_csv())
    return 0


def cmd_where(args: argparse.Namespace) -> int:
    """Evaluate a lambda predicate over the rows of a CSV file.

    Returns:
        0 on success
        2 on invalid input
        3 if a pattern match timed out
    """
    from mockquery.core.query import PatternTimeout, compile_predicate, where

    input_path = Path(args.input)
    if not input_path.exists():
        logging.error("Dataset not found: %s", input_path)
        return 2

    try:
        predicate = compile_predicate(args.predicate)
    except ValueError as e:
        logging.error("%s", e)
        return 2

    df = pl.read_csv(str(input_path))
    try:
        rows = list(where(df.iter_rows(named=True), predicate))
    except PatternTimeout as e:
        logging.error("%s", e)
        return 3
    except regex.error as e:
        logging.error("Invalid LIKE pattern: %s", e)
        return 2
    except (KeyError, TypeError, AttributeError) as e:
        logging.error("Predicate failed: %s", e)
        return 2

    logging.info("Matched %d of %d rows from %s", len(rows), df.height, input_path)
    sys.stdout.write(pl.DataFrame(rows, schema=df.schema).write_csv())
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mockquery",
        description=f"In-memory query emulation tools (v{__version__})",
    )
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    p.add_argument(
        "--warnings-only",
        action="store_true",
        help="Show only warnings and errors (overrides --verbose)",
    )
    p.add_argument(
        "--errors-only",
        action="store_true",
        help="Show only errors (overrides --warnings-only and --verbose)",
    )

    sub = p.add_subparsers(dest="command", required=True)

    p_match = sub.add_parser("match", help="Test a subject against a LIKE pattern")
    p_match.add_argument("subject", help="Value to test")
    p_match.add_argument("pattern", help="LIKE pattern (_ and %% wildcards)")
    p_match.add_argument("--escape", default=None, help="Escape character")
    p_match.set_defaults(func=cmd_match)

    p_translate = sub.add_parser(
        "translate", help="Print the regular expression for a LIKE pattern"
    )
    p_translate.add_argument("pattern", help="LIKE pattern (_ and %% wildcards)")
    p_translate.add_argument("--escape", default=None, help="Escape character")
    p_translate.set_defaults(func=cmd_translate)

    p_filter = sub.add_parser("filter", help="Filter a CSV file with LIKE and other filters")
    p_filter.add_argument("--input", required=True, help="CSV file to filter")
    p_filter.add_argument("--query", default=None, help="YAML query file (filters, columns, ...)")
    p_filter.add_argument("--column", default=None, help="Column to match against --pattern")
    p_filter.add_argument("--pattern", default=None, help="LIKE pattern for --column")
    p_filter.add_argument("--escape", default=None, help="Escape character for --pattern")
    p_filter.add_argument(
        "--not",
        dest="negate",
        action="store_true",
        help="Keep rows that do NOT match --pattern",
    )
    p_filter.add_argument("--columns", default=None, help="Comma-separated output columns")
    p_filter.add_argument("--limit", type=int, default=None, help="Maximum rows to output")
    p_filter.set_defaults(func=cmd_filter)

    p_where = sub.add_parser("where", help="Filter CSV rows with a lambda predicate")
    p_where.add_argument("--input", required=True, help="CSV file to filter")
    p_where.add_argument(
        "--predicate",
        required=True,
        help="Lambda over a row dict, e.g. \"lambda row: functions.like(row['name'], 'jo%%')\"",
    )
    p_where.set_defaults(func=cmd_where)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=bool(args.verbose),
        warnings_only=bool(getattr(args, "warnings_only", False)),
        errors_only=bool(getattr(args, "errors_only", False)),
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
