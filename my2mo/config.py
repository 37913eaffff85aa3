#!/usr/bin/env python3
# config.py
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple
from dotenv import load_dotenv

from errors import MissingManifest
from utils import PathValidator

MY2MO_VERSION = "1.0.1"

# --- Manifest layout (inside the manifest directory) ---
TABLES_FILE = "import.tables"
JOINS_FILE = "import.joins"
FIELDS_DIR = "fields"
LOG_FILE = "mongoimport.log"

# --- Delimiter modes ---
CSV = "csv"
TSV = "tsv"

# Sort field value meaning "keep the merge-join order"
UNORDERED = "-"

# Rows pulled per round trip when exporting from MySQL
EXPORT_BATCH_SIZE = 10000


@dataclass(frozen=True)
class ImportConfig:
    """
    Run configuration for my2mo-import, built once at startup and passed to
    every component.

    Usage:
        config = ImportConfig.from_env(source_dir="dump", database="shop")
        config.validate()
    """
    source_dir: str
    database: str
    manifest_dir: Optional[str] = None
    dry_run: bool = False
    tab_delimited: bool = False
    import_args: Tuple[str, ...] = field(default_factory=tuple)
    mongoimport_bin: str = "mongoimport"
    mongo_uri: Optional[str] = None

    def __post_init__(self):
        # Manifest files live next to the data files unless overridden
        if not self.manifest_dir:
            object.__setattr__(self, "manifest_dir", self.source_dir)
        object.__setattr__(self, "source_dir", os.path.realpath(self.source_dir))
        object.__setattr__(self, "manifest_dir", os.path.realpath(self.manifest_dir))
        object.__setattr__(self, "import_args", tuple(self.import_args))

    @classmethod
    def from_env(cls, **kwargs):
        """Fills loader settings from the environment (.env honored)."""
        load_dotenv()
        kwargs.setdefault("mongoimport_bin", os.getenv("MONGOIMPORT_BIN", "mongoimport"))
        kwargs.setdefault("mongo_uri", os.getenv("MONGO_URI") or None)
        return cls(**kwargs)

    @property
    def filetype(self):
        return TSV if self.tab_delimited else CSV

    @property
    def tables_path(self):
        return os.path.join(self.manifest_dir, TABLES_FILE)

    @property
    def joins_path(self):
        return os.path.join(self.manifest_dir, JOINS_FILE)

    @property
    def fields_dir(self):
        return os.path.join(self.manifest_dir, FIELDS_DIR)

    @property
    def log_path(self):
        return os.path.join(self.manifest_dir, LOG_FILE)

    def data_path(self, table, filetype=None):
        return os.path.join(self.source_dir, f"{table}.{filetype or self.filetype}")

    def validate(self):
        """Raises ConfigError unless every directory and manifest is usable."""
        PathValidator.check_directory(self.manifest_dir, writable=True)
        PathValidator.check_directory(self.source_dir)
        PathValidator.check_directory(self.fields_dir)
        PathValidator.check_file(self.tables_path, error=MissingManifest)
        if not self.dry_run:
            PathValidator.check_executable(self.mongoimport_bin)


def mysql_settings():
    """MySQL connection settings for my2mo-export, read the same way as the other DB tools."""
    load_dotenv()
    return {
        'userName': os.getenv("DB_USERNAME", "root"),
        'passWord': os.getenv("DB_PASSWORD", ""),
        'host': os.getenv("DB_HOST", "127.0.0.1"),
        'port': int(os.getenv("DB_PORT", 3306)),
        'dataBase': os.getenv("DB_NAME"),
    }
