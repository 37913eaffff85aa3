#!/usr/bin/env python3
# my2mo_export.py
# Thin CLI wrapper using dotenv-based envs (DB_USERNAME, DB_PASSWORD, DB_HOST, DB_PORT, DB_NAME)

import argparse
import os
import sys

from config import MY2MO_VERSION, FIELDS_DIR, mysql_settings
from errors import ConfigError
from manifest import read_table_specs
from SQL_DB_export import SQL_DB_Export
from utils import ArgumentParser, PathValidator


def build_parser():
    parser = ArgumentParser(
        prog="my2mo-export",
        usage="%(prog)s [OPTION]... MANIFESTDIR DATADIR",
        description="Exports the tables listed in import.tables from MySQL into data files for my2mo-import.",
        epilog="Connection settings are read from the environment or a .env file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("manifest_dir", metavar="MANIFESTDIR", help="Directory with import.tables and fields directory")
    parser.add_argument("data_dir", metavar="DATADIR", help="Directory to write data files to")
    parser.add_argument("-n", "--dry-run", action="store_true", help="Print the SELECT statements; do not export")
    parser.add_argument("-t", "--tab-delimited", action="store_true", help="Write tab-delimited files")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {MY2MO_VERSION}")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    manifest_dir = os.path.realpath(args.manifest_dir)
    settings = mysql_settings()
    try:
        PathValidator.check_directory(manifest_dir)
        PathValidator.check_directory(os.path.join(manifest_dir, FIELDS_DIR))
        if not settings['dataBase']:
            raise ConfigError("DB_NAME is not set")
        specs = read_table_specs(manifest_dir)
    except ConfigError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return 1

    db = SQL_DB_Export(**settings)
    db.export_all(
        specs,
        fields_dir=os.path.join(manifest_dir, FIELDS_DIR),
        data_dir=os.path.realpath(args.data_dir),
        tab_delimited=args.tab_delimited,
        dry_run=args.dry_run,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
