#!/usr/bin/env python3
# import_log.py
import os
from contextlib import contextmanager

from logging_config import logger


class LogBlock:
    """One BEGIN/END section of the import log."""

    def __init__(self, stream):
        self.stream = stream

    def write(self, key, value):
        self.stream.write(f"{key}: {value}\n")
        self.stream.flush()


class ImportLog:
    """
    Append-only, human-readable record of an import run (mongoimport.log).

    Usage:
        with ImportLog(path) as log:
            with log.block("TABLE", "users") as block:
                block.write("fields", "id, name")
    """

    def __init__(self, path):
        self.path = path
        self.stream = None

    def open(self):
        if self.stream is None:
            self.stream = open(self.path, "a", encoding="utf-8")
        return self

    def close(self):
        if self.stream is not None:
            self.stream.close()
            self.stream = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def name(self):
        return os.path.basename(self.path)

    def header(self, message):
        self.stream.write(f"{message}\n")
        self.stream.flush()

    @contextmanager
    def block(self, kind, name):
        """
        Writes the BEGIN marker, yields a LogBlock and always writes the END
        marker. A failure inside the block is recorded with its stage and
        re-raised.
        """
        self.stream.write(f"\n-- BEGIN {kind}: {name}\n")
        self.stream.flush()
        try:
            yield LogBlock(self.stream)
        except Exception as err:
            stage = getattr(err, "stage", "error")
            self.stream.write(f"error: {stage}: {err}\n")
            logger.debug(f"{kind} {name} failed at stage '{stage}': {err}")
            raise
        finally:
            self.stream.write(f"-- END {kind}: {name}\n")
            self.stream.flush()
