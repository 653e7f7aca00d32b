"""Command-line interface for the PNG database.

Environment variables:
    PNGDB_FILE: Database file used when --file is not given
    PNGDB_WIDTH / PNGDB_HEIGHT: Default dimensions for `create`
    PNGDB_LOG_LEVEL: Logging level (default: WARNING)
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from tqdm import tqdm

from .config import ConfigError, Settings, load_import_config
from .core.models import Row, Schema
from .core.values import dump_value
from .errors import BoundsError, PngDbError
from .log import setup_logging
from .storage.database import PngDatabase

SAMPLE_SCHEMA = {"name": "string", "age": "number"}
SAMPLE_ROWS = [
    (10, 20, {"name": "Alice", "age": 30}),
    (50, 60, {"name": "Bob", "age": 25}),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_schema_arg(text: str) -> Schema:
    """Accept either a JSON object or a ``name:type,...`` list."""
    text = text.strip()
    if text.startswith("{"):
        try:
            return Schema.from_dict(json.loads(text))
        except (ValueError, AttributeError):
            print(f"Error: Invalid schema JSON: {text}")
            sys.exit(1)
    return Schema.from_spec(text)


def print_rows(rows: list[Row], pretty: bool = True) -> None:
    for row in rows:
        if pretty:
            body = json.dumps(row.data, indent=2)
        else:
            body = dump_value(row.data)
        print(f"  Position ({row.x}, {row.y}): {body}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def create(args):
    """Create an empty database file."""
    schema = parse_schema_arg(args.schema)
    PngDatabase.create_empty(args.width, args.height, schema, args.file)
    print(f"Created database: {args.file} ({args.width}x{args.height})")


def insert(args):
    """Insert one JSON row and save."""
    db = PngDatabase.load(args.file)
    db.insert_json(args.x, args.y, args.data)
    db.save(args.file)
    print(f"Inserted data at ({args.x}, {args.y})")


def query(args):
    """Run a WHERE filter against the database."""
    db = PngDatabase.load(args.file)
    results = db.query(args.where)

    if args.json:
        print(db.rows_json(results))
        return

    if not results:
        print("No results found")
        return

    print(f"Found {len(results)} result(s):")
    print_rows(results)


def list_rows(args):
    """List every row in the database."""
    db = PngDatabase.load(args.file)

    if args.json:
        print(db.rows_json())
        return

    print(f"Database: {args.file} ({db.width}x{db.height})")
    print(f"Schema: {db.schema_json()}")
    print(f"Rows: {len(db)}")
    print_rows(db.rows, pretty=False)


def sample(args):
    """Write the demo database with two rows."""
    db = PngDatabase(256, 256, Schema(fields=dict(SAMPLE_SCHEMA)))
    for x, y, data in SAMPLE_ROWS:
        db.insert(x, y, data)
    db.save(args.file)
    print(f"Created sample database: {args.file} with {len(db)} rows")
    print("Try: query 'WHERE age > 28'")


def import_rows(args):
    """Bulk-insert rows from a YAML config file."""
    try:
        config = load_import_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    path = Path(args.file)
    if path.exists():
        db = PngDatabase.load(path)
    else:
        settings = args.settings
        db = PngDatabase(
            config.get("width", settings.width),
            config.get("height", settings.height),
            Schema.from_dict(config["schema"]),
        )

    added = 0
    skipped = 0
    for entry in tqdm(config["rows"], desc="Importing", unit="row"):
        try:
            dump_value(entry["data"])
            db.insert(entry["x"], entry["y"], entry["data"])
            added += 1
        except BoundsError as e:
            tqdm.write(f"Skipped: {e}")
            skipped += 1
        except (TypeError, ValueError) as e:
            tqdm.write(f"Skipped ({entry['x']}, {entry['y']}): payload is not JSON: {e}")
            skipped += 1

    db.save(path)
    print(f"\nImported {added} row(s), skipped {skipped}. Total in database: {len(db)}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PNG Database - store and query JSON rows in PNG text chunks",
        epilog="Environment variables: PNGDB_FILE, PNGDB_WIDTH, PNGDB_HEIGHT, PNGDB_LOG_LEVEL",
    )
    parser.add_argument(
        "--file", "-f",
        default=settings.file,
        help=f"Path to database PNG (default: {settings.file})",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- create ---
    create_parser = subparsers.add_parser("create", help="Create an empty database")
    create_parser.add_argument("--width", "-W", type=int, default=settings.width, help=f"Image width (default: {settings.width})")
    create_parser.add_argument("--height", "-H", type=int, default=settings.height, help=f"Image height (default: {settings.height})")
    create_parser.add_argument("--schema", "-s", required=True, help='Fields as "name:string,age:number" or a JSON object')
    create_parser.set_defaults(func=create)

    # --- insert ---
    insert_parser = subparsers.add_parser("insert", help="Insert a JSON row at (x, y)")
    insert_parser.add_argument("--x", "-x", type=int, required=True, help="Column")
    insert_parser.add_argument("--y", "-y", type=int, required=True, help="Row")
    insert_parser.add_argument("--data", "-d", required=True, help="JSON payload")
    insert_parser.set_defaults(func=insert)

    # --- query ---
    query_parser = subparsers.add_parser("query", help="Filter rows with a WHERE clause")
    query_parser.add_argument("where", help='Filter, e.g. "WHERE age > 28 AND x < 100"')
    query_parser.add_argument("--json", action="store_true", help="Print results as JSON")
    query_parser.set_defaults(func=query)

    # --- list ---
    list_parser = subparsers.add_parser("list", help="List all rows")
    list_parser.add_argument("--json", action="store_true", help="Print rows as JSON")
    list_parser.set_defaults(func=list_rows)

    # --- sample ---
    sample_parser = subparsers.add_parser("sample", help="Create a demo database")
    sample_parser.set_defaults(func=sample)

    # --- import ---
    import_parser = subparsers.add_parser("import", help="Bulk-insert rows from a YAML file")
    import_parser.add_argument("config", help="Path to YAML file with a 'rows' list")
    import_parser.set_defaults(func=import_rows)

    return parser


def main(argv=None):
    load_dotenv()
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    parser = build_parser(settings)
    args = parser.parse_args(argv)
    args.settings = settings
    setup_logging(args.log_level)

    try:
        args.func(args)
    except FileNotFoundError as e:
        print(f"Error: {e.filename} does not exist")
        sys.exit(1)
    except PngDbError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
