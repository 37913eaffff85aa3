#!/usr/bin/env python3
# manifest.py
"""
Readers for the flat manifest files written by my2mo-fields:

    import.tables          TABLE [SELECT SQL]
    import.joins           OUTPUT table1.field1 table2.field2 SORTFIELD|-
    fields/<table>.fields  COLUMN [SELECT SQL]

Lines starting with '#' and blank lines are ignored. The first
whitespace-delimited token of a line is the name.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from config import TABLES_FILE, JOINS_FILE, UNORDERED
from errors import (
    MissingManifest, NoTablesDeclared, MalformedJoinManifest,
    MissingFieldFile, EmptyFieldList, UnreadableFieldList,
)
from logging_config import logger


@dataclass(frozen=True)
class TableSpec:
    name: str
    sort_hint: Optional[str] = None


@dataclass(frozen=True)
class FieldSpec:
    name: str
    select_expr: Optional[str] = None


@dataclass(frozen=True)
class FieldRef:
    table: str
    field: str

    @classmethod
    def parse(cls, token):
        table, sep, name = token.partition(".")
        if not sep or not table or not name:
            raise MalformedJoinManifest(f"'{token}' is not a table.field reference")
        return cls(table, name)

    def __str__(self):
        return f"{self.table}.{self.field}"


@dataclass(frozen=True)
class JoinSpec:
    output_name: str
    left: FieldRef
    right: FieldRef
    sort_field: str = UNORDERED

    @property
    def unordered(self):
        return self.sort_field == UNORDERED


def _manifest_lines(path):
    """Yields (first token, rest of line) for every non-comment line."""
    with open(path, encoding="utf-8") as fh:
        for line in fh:
            if line.startswith("#"):
                continue
            parts = line.split(None, 1)
            if not parts:
                continue
            rest = parts[1].strip() if len(parts) > 1 else ""
            yield parts[0], rest or None


def read_first_tokens(path):
    return [name for name, _ in _manifest_lines(path)]


def read_table_specs(manifest_dir):
    """
    Returns:
        list[TableSpec]: Tables in manifest order.
    """
    path = os.path.join(manifest_dir, TABLES_FILE)
    try:
        specs = [TableSpec(name, hint) for name, hint in _manifest_lines(path)]
    except OSError as e:
        raise MissingManifest(f"{path}: {e.strerror or e}")
    except UnicodeDecodeError as e:
        raise MissingManifest(f"{path}: not a readable UTF-8 file ({e.reason})")

    if not specs:
        raise NoTablesDeclared("No tables found")
    return specs


def read_field_specs(fields_dir, table):
    path = os.path.join(fields_dir, f"{table}.fields")
    if not os.path.isfile(path):
        raise MissingFieldFile(f"{table}, no field file found!", entry=table)
    try:
        specs = [FieldSpec(name, expr) for name, expr in _manifest_lines(path)]
    except OSError as e:
        raise MissingFieldFile(f"{path}: {e.strerror or e}", entry=table)
    except UnicodeDecodeError as e:
        raise UnreadableFieldList(
            f"{table}, field file is not valid UTF-8 ({e.reason})", entry=table
        )

    if not specs:
        raise EmptyFieldList(f"{table}, no import fields defined!", entry=table)
    return specs


def read_field_list(fields_dir, table) -> List[str]:
    return [spec.name for spec in read_field_specs(fields_dir, table)]


def read_join_specs(manifest_dir):
    """
    Join manifests are read as one token stream, grouped by four, so a spec
    may span lines. A missing file means no joins.
    """
    path = os.path.join(manifest_dir, JOINS_FILE)
    if not os.path.exists(path):
        return []

    tokens = []
    try:
        with open(path, encoding="utf-8") as fh:
            for line in fh:
                if not line.startswith("#"):
                    tokens.extend(line.split())
    except OSError as e:
        raise MalformedJoinManifest(f"{path}: {e.strerror or e}")
    except UnicodeDecodeError as e:
        raise MalformedJoinManifest(f"{path}: not a readable UTF-8 file ({e.reason})")

    if len(tokens) % 4 != 0:
        raise MalformedJoinManifest(
            f"{path}: expected groups of 4 tokens (OUTPUT TABLE.FIELD TABLE.FIELD SORTFIELD), found {len(tokens)} tokens"
        )

    specs = []
    for i in range(0, len(tokens), 4):
        output_name, left, right, sort_field = tokens[i:i + 4]
        specs.append(JoinSpec(output_name, FieldRef.parse(left), FieldRef.parse(right), sort_field))

    logger.debug(f"Read {len(specs)} join specs from {path}")
    return specs
