#!/usr/bin/env python3
# importer.py
import os

from errors import MissingDataFile, ImportFailed
from logging_config import logger
from manifest import read_field_list
from mongoimport import MongoImport
from results import ImportResult


class TableImporter:
    """
    Loads one table's delimited data file into the collection of the same
    name, mapping the first N columns to the table's field list.

    Usage:
        importer = TableImporter(config, log)
        result = importer.import_table(TableSpec("users"))
    """

    def __init__(self, config, log, loader=None):
        self.config = config
        self.log = log
        self.loader = loader or MongoImport(config, log)

    def import_table(self, spec):
        table = spec.name
        path = self.config.data_path(table)

        with self.log.block("TABLE", table) as block:
            if not os.path.isfile(path):
                raise MissingDataFile(f"skipped (no data file {os.path.basename(path)})", entry=table)

            fields = read_field_list(self.config.fields_dir, table)
            block.write("fields", ", ".join(fields))

            logger.info(f"...{table}")
            status = self.loader.load_file(table, fields, self.config.filetype, path, block)
            block.write("exit status", status)

            if status != 0:
                raise ImportFailed(f"mongoimport exited with status {status}", entry=table, exit_status=status)

        return ImportResult(table, "table", ok=True, exit_status=status)
