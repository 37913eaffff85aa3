#!/usr/bin/env python3
# schema_fields.py
"""
Builds the import manifest from an SQL schema dump (mysqldump --no-data):
import.tables lists every CREATE TABLE, fields/<table>.fields lists its
columns in declaration order.
"""

import os

from config import TABLES_FILE, FIELDS_DIR
from logging_config import logger
from utils import ensure_directory, strip_punctuation

# First token of a line that ends a table's column list
_END_OF_COLUMNS = {")", "KEY", "PRIMARY", "UNIQUE"}


def _table_name(tokens):
    # CREATE TABLE [IF NOT EXISTS] name
    rest = tokens[2:]
    if [t.upper() for t in rest[:3]] == ["IF", "NOT", "EXISTS"]:
        rest = rest[3:]
    return strip_punctuation(rest[0]) if rest else ""


def parse_schema(lines):
    """
    Args:
        lines (iterable): Lines of the schema file.
    Returns:
        dict: table name -> list of field names, in schema order.
    """
    tables = {}
    fields = None

    for line in lines:
        tokens = line.split()
        if not tokens:
            continue

        if fields is not None:
            if tokens[0] in _END_OF_COLUMNS:
                fields = None
            else:
                name = strip_punctuation(tokens[0])
                if name:
                    fields.append(name)
                continue

        if len(tokens) >= 3 and tokens[0].upper() == "CREATE" and tokens[1].upper() == "TABLE":
            table = _table_name(tokens)
            if not table:
                logger.warning(f"Skipping unnamed table: {line.strip()}")
                continue
            fields = tables.setdefault(table, [])

    return tables


def write_manifest(tables, output_dir):
    """
    Writes import.tables and fields/<table>.fields under `output_dir`.

    Returns:
        str: Path of the tables file.
    """
    fields_dir = os.path.join(output_dir, FIELDS_DIR)
    ensure_directory(fields_dir)

    tables_path = os.path.join(output_dir, TABLES_FILE)
    with open(tables_path, "w", encoding="utf-8") as tf:
        tf.write("# List of tables to import\n")
        tf.write("# TABLE [SELECT SQL]\n")
        for table, fields in tables.items():
            tf.write(f"{table}\n")

            with open(os.path.join(fields_dir, f"{table}.fields"), "w", encoding="utf-8") as ff:
                ff.write("# List of fields to import\n")
                ff.write("# COLUMN [SELECT SQL]\n")
                for name in fields:
                    ff.write(f"{name}\n")

            print(f"...{table:<30} {len(fields):2d} fields")

    print(f"Found {len(tables)} tables")
    return tables_path


def generate_manifest(schema_path, output_dir):
    with open(schema_path, encoding="utf-8", errors="replace") as fh:
        tables = parse_schema(fh)
    write_manifest(tables, output_dir)
    return tables
