"""
Shared pytest fixtures for the my2mo tests.

Provides a throw-away manifest/data workspace and a loader double that
records what would have been sent to mongoimport.
"""

import os
import sys

import pytest

# Add the module directory to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
module_dir = os.path.join(project_root, 'my2mo')
sys.path.insert(0, module_dir)

# Keep progress logging on the console only
os.environ.pop('LOG_FILE', None)


def pytest_configure(config):
    """Add integration marker."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (needs mongoimport and a live mongod)"
    )


class FakeLoader:
    """Stands in for MongoImport; keeps every call instead of running mongoimport."""

    def __init__(self, file_status=0, stream_status=0):
        self.file_status = file_status
        self.stream_status = stream_status
        self.file_loads = []
        self.streams = {}
        self.stream_fields = {}

    def load_file(self, collection, fields, filetype, path, block):
        self.file_loads.append((collection, list(fields), filetype, path))
        return self.file_status

    def load_stream(self, collection, fields, lines, block):
        rows = [line.rstrip("\n").split("\t") for line in lines]
        self.streams[collection] = rows
        self.stream_fields[collection] = list(fields)
        return self.stream_status, len(rows)

    def documents(self, collection):
        """Joined rows as dicts, the way mongoimport would map them."""
        fields = self.stream_fields[collection]
        return [dict(zip(fields, row)) for row in self.streams[collection]]


@pytest.fixture
def fake_loader():
    return FakeLoader()


@pytest.fixture
def make_workspace(tmp_path):
    """
    Factory writing import.tables, import.joins, fields/*.fields and data files.

    Args:
        tables (list[str]): Lines of import.tables.
        fields (dict): table -> list of field names.
        data (dict): table -> list of records (lists of strings).
        joins (str): Raw content of import.joins, or None for no file.
        ext (str): Data file extension, "tsv" or "csv".
    Returns:
        str: Workspace directory (used as both manifest and source dir).
    """
    def _make(tables=None, fields=None, data=None, joins=None, ext="tsv"):
        root = tmp_path
        (root / "fields").mkdir(exist_ok=True)

        lines = ["# List of tables to import", "# TABLE [SELECT SQL]"] + list(tables or [])
        (root / "import.tables").write_text("\n".join(lines) + "\n", encoding="utf-8")

        for table, names in (fields or {}).items():
            body = "# List of fields to import\n" + "".join(f"{n}\n" for n in names)
            (root / "fields" / f"{table}.fields").write_text(body, encoding="utf-8")

        delimiter = "\t" if ext == "tsv" else ","
        for table, records in (data or {}).items():
            body = "".join(delimiter.join(r) + "\n" for r in records)
            (root / f"{table}.{ext}").write_text(body, encoding="utf-8")

        if joins is not None:
            (root / "import.joins").write_text(joins, encoding="utf-8")

        return str(root)

    return _make
