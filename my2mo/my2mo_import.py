#!/usr/bin/env python3
# my2mo_import.py
"""
Thin CLI wrapper: runs mongoimport for every table listed in import.tables
(and every join in import.joins) using the field lists in fields/*.fields.
"""

import argparse
import sys

from config import ImportConfig, MY2MO_VERSION, LOG_FILE
from errors import ConfigError
from import_jobs import ImportJobs
from logging_config import logger
from utils import ArgumentParser

DESCRIPTION = """\
Runs 'mongoimport' to import a set of comma-delimited data files
from a database export. The list of tables and fields to import
are read from an 'import.tables' file and a set of *.fields files;
tables to join during import are read from an optional 'import.joins' file.
The manifest files can be created from an SQL database schema by my2mo-fields."""

EPILOG = """\
Options after '--' are passed directly to mongoimport.
Report bugs to <https://github.com/lovette/mysql-to-mongo/issues>"""


def build_parser():
    parser = ArgumentParser(
        prog="my2mo-import",
        usage="%(prog)s [OPTION]... SOURCEDIR IMPORTDB [-- IMPORTOPTIONS]",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("source_dir", metavar="SOURCEDIR", help="Directory with data files")
    parser.add_argument("database", metavar="IMPORTDB", help="Mongo database to import into")
    parser.add_argument("-m", "--manifest-dir", metavar="MANIFESTDIR",
                        help="Directory with import.tables and fields directory (default: SOURCEDIR)")
    parser.add_argument("-n", "--dry-run", action="store_true", help="Dry run; do not import")
    parser.add_argument("-t", "--tab-delimited", action="store_true", help="Data files are tab-delimited")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {MY2MO_VERSION}")
    return parser


def split_import_args(argv):
    """Everything after the first '--' belongs to mongoimport."""
    if "--" in argv:
        i = argv.index("--")
        return argv[:i], argv[i + 1:]
    return argv, []


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    own_args, import_args = split_import_args(argv)

    parser = build_parser()
    args, extra = parser.parse_known_args(own_args)
    if extra:
        parser.error("mongoimport arguments must be preceded by '--'")

    try:
        config = ImportConfig.from_env(
            source_dir=args.source_dir,
            database=args.database,
            manifest_dir=args.manifest_dir,
            dry_run=args.dry_run,
            tab_delimited=args.tab_delimited,
            import_args=tuple(import_args),
        )
        config.validate()
        report = ImportJobs(config).run()
    except ConfigError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return 1

    if report.failed:
        logger.warning(f"{len(report.failed)} of {len(report.results)} imports failed, see {LOG_FILE}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
