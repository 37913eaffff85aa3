#!/usr/bin/env python3
# my2mo_fields.py
"""
Thin CLI wrapper around schema_fields: parses an SQL schema file and writes
the import.tables file and the fields directory used by my2mo-export and
my2mo-import.
"""

import argparse
import os
import sys

from config import MY2MO_VERSION, TABLES_FILE, FIELDS_DIR
from errors import ConfigError
from schema_fields import generate_manifest
from utils import ArgumentParser, PathValidator

DESCRIPTION = """\
Parses an SQL database schema file and creates an 'import.tables'
file with a list of tables found, and a directory containing a file
for each table listing the table columns/fields.
These files are then used by my2mo-export and my2mo-import
to import data files into a MongoDB database."""


def build_parser():
    parser = ArgumentParser(
        prog="my2mo-fields",
        usage="%(prog)s [OPTION]... OUTPUTDIR SCHEMAFILE",
        description=DESCRIPTION,
        epilog="Report bugs to <https://github.com/lovette/mysql-to-mongo/issues>",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("output_dir", metavar="OUTPUTDIR", help="Directory to write import.tables and fields files")
    parser.add_argument("schema_file", metavar="SCHEMAFILE", help="File containing SQL database schema")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {MY2MO_VERSION}")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    output_dir = os.path.realpath(args.output_dir)
    schema_file = os.path.realpath(args.schema_file)
    try:
        PathValidator.check_directory(output_dir, writable=True)
        PathValidator.check_file(schema_file)
    except ConfigError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return 1

    print(f"Generating tables and fields from {os.path.basename(schema_file)}...")
    try:
        generate_manifest(schema_file, output_dir)
    except OSError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return 1

    print(f"Output saved to {output_dir}")
    print(f"Tables saved to {TABLES_FILE}")
    print(f"Field files saved to {FIELDS_DIR}/*.fields")
    return 0


if __name__ == "__main__":
    sys.exit(main())
