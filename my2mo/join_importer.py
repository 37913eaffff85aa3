#!/usr/bin/env python3
# join_importer.py
"""
Joins two tab-delimited tables into one collection.

    read -> sort each side on its join key -> left outer merge-join
         -> (optional) numeric sort on the sort field -> mongoimport stdin

Join keys are compared as raw strings (byte order, so "10" < "9"), the
optional secondary sort is numeric. Both orderings match what the sort/join
command line tools did for this job.
"""

import os
from contextlib import contextmanager

import pandas as pd

from config import TSV
from errors import (
    My2moError, JoinRequiresTabDelimited, UnknownJoinField, UnknownSortField,
    JoinFailed, MissingDataFile, MissingFieldFile,
)
from logging_config import logger
from manifest import read_field_list
from mongoimport import MongoImport
from results import ImportResult

# Leading number as read by `sort -n`; anything else sorts as 0
NUMERIC_PREFIX = r"^\s*(-?(?:\d+(?:\.\d*)?|\.\d+))"


def column_index(fields, name, table):
    """0-based position of the first field called `name`."""
    try:
        return fields.index(name)
    except ValueError:
        raise UnknownJoinField(f"{table} has no field '{name}'")


def synthesize_fields(left_fields, left_key, right_fields, right_key):
    """
    Output columns of a join: the left join field, the remaining left fields
    and the remaining right fields, each in their original order. The right
    join field is dropped since it always equals the left one.
    """
    return (
        [left_fields[left_key]]
        + left_fields[:left_key] + left_fields[left_key + 1:]
        + right_fields[:right_key] + right_fields[right_key + 1:]
    )


def read_records(path, width):
    """
    Reads a tab-delimited file into a frame of `width` string columns.
    Short records are padded with empty strings, extra columns are dropped.

    Bytes that are not UTF-8 are kept as surrogate escapes and written back
    out unchanged by the loader. A blank line is a record with empty fields.
    """
    rows = []
    with open(path, encoding="utf-8", errors="surrogateescape", newline="") as fh:
        for line in fh:
            values = line.rstrip("\r\n").split("\t")[:width]
            values.extend([""] * (width - len(values)))
            rows.append(values)
    return pd.DataFrame(rows, columns=list(range(width)), dtype=object)


def sort_by_key(frame, column):
    # mergesort is stable; object columns compare as Python str (code point order)
    return frame.sort_values(by=column, kind="mergesort")


def numeric_key(values):
    number = values.astype(str).str.extract(NUMERIC_PREFIX, expand=False)
    return pd.to_numeric(number, errors="coerce").fillna(0.0)


def sort_numeric(frame, column):
    if frame.empty:
        return frame
    return frame.sort_values(by=column, kind="mergesort", key=numeric_key)


def _without(row, index):
    return row[:index] + row[index + 1:]


def merge_join(left_rows, right_rows, left_key, right_key, right_width):
    """
    Left outer merge-join of two row iterables already sorted on their keys.

    Yields one row per (left, matching right) pair in left order, and the
    left row padded with empty right-side fields when nothing matches.
    Rows are tuples laid out as synthesize_fields() describes.
    """
    blank = ("",) * (right_width - 1)
    right_iter = iter(right_rows)
    right = next(right_iter, None)
    group_key = None
    group = []

    for row in left_rows:
        key = row[left_key]
        if group_key is None or key != group_key:
            while right is not None and right[right_key] < key:
                right = next(right_iter, None)
            group_key = key
            group = []
            while right is not None and right[right_key] == key:
                group.append(_without(right, right_key))
                right = next(right_iter, None)

        head = (key,) + _without(row, left_key)
        if group:
            for match in group:
                yield head + match
        else:
            yield head + blank


def _rows(frame):
    return frame.itertuples(index=False, name=None)


class JoinImporter:
    """
    Imports the join of two source tables into `spec.output_name`.

    Usage:
        importer = JoinImporter(config, log)
        result = importer.import_join(spec)
    """

    def __init__(self, config, log, loader=None):
        self.config = config
        self.log = log
        self.loader = loader or MongoImport(config, log)

    @contextmanager
    def _stage(self, name, stage):
        try:
            yield
        except JoinFailed:
            raise
        except Exception as e:
            raise JoinFailed(f"{stage} stage failed: {e}", entry=name, stage=stage, cause=e) from e

    def _staged(self, name, stage, rows):
        # Failures while the loader pulls rows belong to `stage`, not to the load
        with self._stage(name, stage):
            yield from rows

    def _field_list(self, name, table):
        try:
            return read_field_list(self.config.fields_dir, table)
        except MissingFieldFile as e:
            raise JoinFailed(str(e), entry=name, stage="fields", cause=e) from e

    def _read_side(self, name, table, width):
        path = self.config.data_path(table, TSV)
        if not os.path.isfile(path):
            missing = MissingDataFile(f"{table}: no data file {os.path.basename(path)}", entry=table)
            raise JoinFailed(str(missing), entry=name, stage="read", cause=missing)
        with self._stage(name, "read"):
            return read_records(path, width)

    def joined_rows(self, spec, left_fields, right_fields, left_key, right_key, sort_column=None):
        """
        Runs read, sort and join for `spec` and returns an iterable of output
        rows. Without a sort column the rows are produced lazily.
        """
        name = spec.output_name
        left = self._read_side(name, spec.left.table, len(left_fields))
        right = self._read_side(name, spec.right.table, len(right_fields))
        logger.debug(f"{name}: {len(left)} left records, {len(right)} right records")

        with self._stage(name, "sort"):
            left = sort_by_key(left, left_key)
            right = sort_by_key(right, right_key)

        rows = merge_join(_rows(left), _rows(right), left_key, right_key, len(right_fields))
        if sort_column is None:
            return self._staged(name, "join", rows)

        width = len(left_fields) + len(right_fields) - 1
        with self._stage(name, "join"):
            joined = pd.DataFrame(list(rows), columns=list(range(width)), dtype=object)
        with self._stage(name, "order"):
            joined = sort_numeric(joined, sort_column)
        return _rows(joined)

    def import_join(self, spec):
        name = spec.output_name

        with self.log.block("JOIN", name) as block:
            block.write("join", f"{spec.left} = {spec.right}")
            if not self.config.tab_delimited:
                raise JoinRequiresTabDelimited(
                    f"{name}: joins require tab-delimited data files", entry=name
                )

            left_fields = self._field_list(name, spec.left.table)
            right_fields = self._field_list(name, spec.right.table)
            left_key = column_index(left_fields, spec.left.field, spec.left.table)
            right_key = column_index(right_fields, spec.right.field, spec.right.table)

            fields = synthesize_fields(left_fields, left_key, right_fields, right_key)
            block.write("fields", ", ".join(fields))

            sort_column = None
            if not spec.unordered:
                if spec.sort_field not in fields:
                    raise UnknownSortField(f"{name} has no output field '{spec.sort_field}'", entry=name)
                sort_column = fields.index(spec.sort_field)
            block.write("sort", spec.sort_field)

            logger.info(f"...{name} ({spec.left} = {spec.right})")
            rows = self.joined_rows(spec, left_fields, right_fields, left_key, right_key, sort_column)
            lines = ("\t".join(row) + "\n" for row in rows)

            try:
                status, count = self.loader.load_stream(name, fields, lines, block)
            except JoinFailed:
                raise
            except My2moError as e:
                raise JoinFailed(str(e), entry=name, stage="load", cause=e) from e
            except Exception as e:
                raise JoinFailed(f"load stage failed: {e}", entry=name, stage="load", cause=e) from e

            block.write("records", count)
            block.write("exit status", status)
            if status != 0:
                raise JoinFailed(f"mongoimport exited with status {status}", entry=name, stage="load")

        return ImportResult(name, "join", ok=True, exit_status=status, records=count)
