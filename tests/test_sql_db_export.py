"""
Tests for SQL_DB_export.py with a mocked MySQL connection.
"""

import datetime
import decimal
import os
import sys
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import mysql.connector
from mysql.connector import errorcode

# Setup path and environment
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
module_dir = os.path.join(project_root, 'my2mo')
sys.path.insert(0, module_dir)

from manifest import FieldSpec, TableSpec
from SQL_DB_export import SQL_DB_Export


def _mock_connection(batches):
    cursor = MagicMock()
    cursor.fetchmany.side_effect = list(batches) + [[]]
    cnx = MagicMock()
    cnx.cursor.return_value = cursor
    return cnx, cursor


class TestBuildQuery(unittest.TestCase):
    def setUp(self):
        self.db = SQL_DB_Export("root", "pwd", "127.0.0.1", "shop")

    def test_plain_columns(self):
        query = self.db.build_query(TableSpec("users"), [FieldSpec("id"), FieldSpec("name")])
        self.assertEqual(query, "SELECT `id`, `name` FROM `users`")

    def test_select_expression_and_order(self):
        query = self.db.build_query(
            TableSpec("users", "id DESC"),
            [FieldSpec("id"), FieldSpec("name", "UPPER(name)")],
        )
        self.assertEqual(query, "SELECT `id`, UPPER(name) FROM `users` ORDER BY id DESC")

    def test_format_value(self):
        fmt = SQL_DB_Export._format_value
        self.assertEqual(fmt(None, True), "")
        self.assertEqual(fmt(b"abc", False), "abc")
        self.assertEqual(fmt(datetime.datetime(2020, 1, 2, 3, 4, 5), True), "2020-01-02 03:04:05")
        self.assertEqual(fmt(datetime.date(2020, 1, 2), True), "2020-01-02")
        self.assertEqual(fmt(decimal.Decimal("10.50"), True), "10.50")
        self.assertEqual(fmt("a\tb\nc", True), "a b c")
        self.assertEqual(fmt("a\tb", False), "a\tb")


class TestExport(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = self._tmp.name
        self.fields_dir = os.path.join(self.dir, "fields")
        os.mkdir(self.fields_dir)
        with open(os.path.join(self.fields_dir, "users.fields"), "w", encoding="utf-8") as fh:
            fh.write("# List of fields to import\nid\nname\n")
        self.data_dir = os.path.join(self.dir, "data")
        self.db = SQL_DB_Export("root", "pwd", "127.0.0.1", "shop", batch_size=2)

    def tearDown(self):
        self._tmp.cleanup()

    def _read(self, name):
        with open(os.path.join(self.data_dir, name), encoding="utf-8") as fh:
            return fh.read()

    @patch('SQL_DB_export.mysql.connector.connect')
    def test_export_tab_delimited(self, mock_connect):
        cnx, cursor = _mock_connection([[(1, "ann"), (2, None)], [(3, "x\ty")]])
        mock_connect.return_value = cnx

        report = self.db.export_all([TableSpec("users")], self.fields_dir, self.data_dir, tab_delimited=True)

        self.assertTrue(report.ok)
        self.assertEqual(report.results[0].records, 3)
        self.assertEqual(self._read("users.tsv"), "1\tann\n2\t\n3\tx y\n")
        cursor.execute.assert_called_once_with("SELECT `id`, `name` FROM `users`")
        cursor.fetchmany.assert_called_with(2)
        self.assertTrue(cnx.close.called)

    @patch('SQL_DB_export.mysql.connector.connect')
    def test_export_csv_quotes_values(self, mock_connect):
        cnx, _ = _mock_connection([[(1, "Smith, Ann")]])
        mock_connect.return_value = cnx

        self.db.export_all([TableSpec("users")], self.fields_dir, self.data_dir)
        self.assertEqual(self._read("users.csv"), '1,"Smith, Ann"\n')

    @patch('SQL_DB_export.mysql.connector.connect')
    def test_failed_table_does_not_stop_export(self, mock_connect):
        cnx, _ = _mock_connection([[(1, "ann")]])
        mock_connect.return_value = cnx

        specs = [TableSpec("orders"), TableSpec("users")]
        report = self.db.export_all(specs, self.fields_dir, self.data_dir, tab_delimited=True)

        self.assertEqual([r.name for r in report.failed], ["orders"])
        self.assertEqual(report.failed[0].stage, "fields")
        self.assertEqual([r.name for r in report.succeeded], ["users"])

    @patch('SQL_DB_export.mysql.connector.connect')
    def test_access_denied_is_reported(self, mock_connect):
        mock_connect.side_effect = mysql.connector.Error(msg="denied", errno=errorcode.ER_ACCESS_DENIED_ERROR)

        with patch.object(self.db, 'errorMessage') as mock_error:
            report = self.db.export_all([TableSpec("users")], self.fields_dir, self.data_dir)

        mock_error.assert_called_once_with("Something is wrong with your user name or password")
        self.assertFalse(report.ok)

    @patch('SQL_DB_export.mysql.connector.connect')
    def test_dry_run_prints_queries(self, mock_connect):
        with patch('builtins.print') as mock_print:
            report = self.db.export_all([TableSpec("users")], self.fields_dir, self.data_dir, dry_run=True)

        mock_print.assert_called_once_with("SELECT `id`, `name` FROM `users`")
        self.assertFalse(mock_connect.called)
        self.assertFalse(os.path.exists(self.data_dir))
        self.assertTrue(report.ok)


if __name__ == '__main__':
    unittest.main()
