#!/usr/bin/env python3
# SQL_DB_export.py
import csv
import datetime
import decimal
import os

import mysql.connector
from mysql.connector import errorcode

from config import CSV, TSV, EXPORT_BATCH_SIZE
from errors import My2moError
from logging_config import logger
from manifest import read_field_specs
from results import BatchReport, ImportResult
from utils import ensure_directory


class SQL_DB_Export:
    """
    Dumps manifest tables from MySQL into the data files my2mo-import reads.

    Usage:
        db = SQL_DB_Export(userName="root", passWord="pwd", host="127.0.0.1", dataBase="shop", port=3306)
        db.export_all(specs, fields_dir="manifest/fields", data_dir="dump", tab_delimited=True)
    """

    def __init__(self, userName, passWord, host, dataBase, port=3306, batch_size=EXPORT_BATCH_SIZE):
        self.userName = userName
        self.passWord = passWord
        self.host = host
        self.dataBase = dataBase
        self.port = port
        self.batch_size = batch_size

    # ---------- DB helpers ----------
    def errorMessage(self, message):
        logger.error(f"SQL Error: {message}")

    def _connect(self):
        try:
            return mysql.connector.connect(
                user=self.userName,
                password=self.passWord,
                host=self.host,
                database=self.dataBase,
                port=self.port
            )
        except mysql.connector.Error as err:
            if err.errno == errorcode.ER_ACCESS_DENIED_ERROR:
                self.errorMessage("Something is wrong with your user name or password")
            elif err.errno == errorcode.ER_BAD_DB_ERROR:
                self.errorMessage("Database does not exist")
            else:
                self.errorMessage(str(err))
            raise

    # ---------- Query building ----------
    @staticmethod
    def _quote(identifier):
        return "`" + identifier.replace("`", "``") + "`"

    def build_query(self, spec, field_specs):
        """
        SELECT expression per field is the text after the field name in its
        .fields line, or the column itself. The table's trailing text is
        used as ORDER BY.
        """
        columns = ", ".join(f.select_expr or self._quote(f.name) for f in field_specs)
        query = f"SELECT {columns} FROM {self._quote(spec.name)}"
        if spec.sort_hint:
            query += f" ORDER BY {spec.sort_hint}"
        return query

    # ---------- Value formatting ----------
    @staticmethod
    def _format_value(val, tab_delimited):
        if val is None:
            return ""
        if isinstance(val, (bytes, bytearray)):
            val = val.decode("utf-8", errors="replace")
        elif isinstance(val, (datetime.datetime, datetime.date, datetime.time)):
            val = val.isoformat(sep=" ") if isinstance(val, datetime.datetime) else val.isoformat()
        elif isinstance(val, decimal.Decimal):
            val = format(val, "f")
        else:
            val = str(val)
        if tab_delimited:
            # tsv has no quoting; keep every record on one line
            val = val.replace("\t", " ").replace("\r", " ").replace("\n", " ")
        return val

    def _write_rows(self, cursor, fh, tab_delimited):
        writer = None if tab_delimited else csv.writer(fh, lineterminator="\n")
        count = 0
        while True:
            rows = cursor.fetchmany(self.batch_size)
            if not rows:
                break
            for row in rows:
                values = [self._format_value(v, tab_delimited) for v in row]
                if writer is None:
                    fh.write("\t".join(values) + "\n")
                else:
                    writer.writerow(values)
            count += len(rows)
        return count

    # ---------- High-level API ----------
    def export_table(self, spec, field_specs, data_dir, tab_delimited=False):
        """
        Returns:
            int: Number of rows written to <data_dir>/<table>.csv|tsv.
        """
        ext = TSV if tab_delimited else CSV
        path = os.path.join(data_dir, f"{spec.name}.{ext}")
        query = self.build_query(spec, field_specs)
        logger.debug(f"{spec.name}: {query}")

        cnx = self._connect()
        cursor = cnx.cursor()
        try:
            cursor.execute(query)
            with open(path, "w", encoding="utf-8", newline="") as fh:
                count = self._write_rows(cursor, fh, tab_delimited)
        finally:
            cursor.close()
            cnx.close()

        logger.info(f"...{spec.name}: {count} rows")
        return count

    def export_all(self, specs, fields_dir, data_dir, tab_delimited=False, dry_run=False):
        """
        Exports every table; a failing table is logged and the rest continue.

        Returns:
            BatchReport
        """
        if not dry_run:
            ensure_directory(data_dir)
        report = BatchReport()
        logger.info(f"Exporting {len(specs)} tables from MySQL database '{self.dataBase}'...")

        for spec in specs:
            try:
                field_specs = read_field_specs(fields_dir, spec.name)
                if dry_run:
                    print(self.build_query(spec, field_specs))
                    report.add(ImportResult(spec.name, "export"))
                    continue
                count = self.export_table(spec, field_specs, data_dir, tab_delimited)
                report.add(ImportResult(spec.name, "export", records=count))
            except (My2moError, mysql.connector.Error, OSError) as err:
                logger.error(f"...{spec.name}, export failed: {err}")
                report.add(ImportResult.failure(spec.name, "export", err))

        logger.info(f"Export complete! {report.summary()}")
        return report
