"""
Tests for config.py, utils.py path checks and the import log format.
"""

import dataclasses
import os
import sys
import tempfile
import unittest
from unittest.mock import patch

import pytest

# Setup path and environment
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
module_dir = os.path.join(project_root, 'my2mo')
sys.path.insert(0, module_dir)

from config import ImportConfig, mysql_settings
from errors import ConfigError, MissingDataFile, MissingManifest
from import_log import ImportLog


class TestImportConfig(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = os.path.realpath(self._tmp.name)
        os.mkdir(os.path.join(self.dir, "fields"))
        with open(os.path.join(self.dir, "import.tables"), "w", encoding="utf-8") as fh:
            fh.write("users\n")

    def tearDown(self):
        self._tmp.cleanup()

    def test_manifest_dir_defaults_to_source_dir(self):
        config = ImportConfig(source_dir=self.dir, database="shop")
        self.assertEqual(config.manifest_dir, self.dir)
        self.assertEqual(config.tables_path, os.path.join(self.dir, "import.tables"))
        self.assertEqual(config.joins_path, os.path.join(self.dir, "import.joins"))
        self.assertEqual(config.log_path, os.path.join(self.dir, "mongoimport.log"))

    def test_filetype_follows_delimiter_mode(self):
        self.assertEqual(ImportConfig(source_dir=self.dir, database="d").filetype, "csv")
        config = ImportConfig(source_dir=self.dir, database="d", tab_delimited=True)
        self.assertEqual(config.filetype, "tsv")
        self.assertEqual(config.data_path("users"), os.path.join(self.dir, "users.tsv"))

    def test_is_frozen(self):
        config = ImportConfig(source_dir=self.dir, database="shop", import_args=["--host", "x"])
        self.assertEqual(config.import_args, ("--host", "x"))
        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.database = "other"

    def test_validate_dry_run(self):
        ImportConfig(source_dir=self.dir, database="shop", dry_run=True).validate()

    def test_validate_missing_fields_dir(self):
        os.rmdir(os.path.join(self.dir, "fields"))
        config = ImportConfig(source_dir=self.dir, database="shop", dry_run=True)
        with self.assertRaises(ConfigError) as ctx:
            config.validate()
        self.assertIn("No such directory", str(ctx.exception))

    def test_validate_missing_tables_file(self):
        os.remove(os.path.join(self.dir, "import.tables"))
        config = ImportConfig(source_dir=self.dir, database="shop", dry_run=True)
        with self.assertRaises(MissingManifest):
            config.validate()

    def test_validate_missing_executable(self):
        config = ImportConfig(source_dir=self.dir, database="shop", mongoimport_bin="no-such-mongoimport-binary")
        with self.assertRaises(ConfigError) as ctx:
            config.validate()
        self.assertIn("command not found", str(ctx.exception))

    @patch('config.load_dotenv')
    def test_from_env(self, mock_load):
        env = {"MONGOIMPORT_BIN": "/opt/mongoimport", "MONGO_URI": "mongodb://db1"}
        with patch.dict(os.environ, env):
            config = ImportConfig.from_env(source_dir=self.dir, database="shop")
        self.assertTrue(mock_load.called)
        self.assertEqual(config.mongoimport_bin, "/opt/mongoimport")
        self.assertEqual(config.mongo_uri, "mongodb://db1")

    @patch('config.load_dotenv')
    def test_mysql_settings(self, mock_load):
        env = {"DB_USERNAME": "u", "DB_PASSWORD": "p", "DB_HOST": "h", "DB_PORT": "3307", "DB_NAME": "shop"}
        with patch.dict(os.environ, env):
            settings = mysql_settings()
        self.assertEqual(settings, {
            'userName': "u", 'passWord': "p", 'host': "h", 'port': 3307, 'dataBase': "shop",
        })


def test_log_block_records_error_and_end(tmp_path):
    path = str(tmp_path / "mongoimport.log")
    with ImportLog(path) as log:
        log.header("Results of mongoimport of 1 tables and 0 joins into Mongo database 'shop'...")
        with pytest.raises(MissingDataFile):
            with log.block("TABLE", "users") as block:
                block.write("fields", "id")
                raise MissingDataFile("skipped (no data file users.tsv)", entry="users")

    with open(path, encoding="utf-8") as fh:
        text = fh.read()
    assert text == (
        "Results of mongoimport of 1 tables and 0 joins into Mongo database 'shop'...\n"
        "\n-- BEGIN TABLE: users\n"
        "fields: id\n"
        "error: read: skipped (no data file users.tsv)\n"
        "-- END TABLE: users\n"
    )
