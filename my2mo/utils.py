import argparse
import os
import re
import shutil
import sys
from logging_config import logger
from errors import ConfigError

# Punctuation as in POSIX [[:punct:]], minus the underscore that is legal in identifiers
_EDGE_PUNCT = re.compile(r"^[^\w\s]+|[^\w\s]+$")


def strip_punctuation(token):
    """Strips quoting/backticks/commas/parentheses from both ends of an SQL token."""
    return _EDGE_PUNCT.sub("", token)


def ensure_directory(path):
    """Creates directory if it doesn't exist."""
    if not os.path.isdir(path):
        os.makedirs(path)
        logger.debug(f"Created directory {path}")


class PathValidator:
    """
    Presence/readability checks run before any import starts.
    Every failure raises ConfigError with the same wording the shell tools used.
    """

    @staticmethod
    def check_directory(path, writable=False):
        """
        Args:
            path (str): Directory to check.
            writable (bool): Also require write permission.
        """
        if not os.path.isdir(path):
            raise ConfigError(f"{path}: No such directory")
        if not os.access(path, os.R_OK):
            raise ConfigError(f"{path}: Read permission denied")
        if writable and not os.access(path, os.W_OK):
            raise ConfigError(f"{path}: Write permission denied")

    @staticmethod
    def check_file(path, error=ConfigError):
        if not os.path.isfile(path):
            raise error(f"{path}: No such file")
        if not os.access(path, os.R_OK):
            raise error(f"{path}: Read permission denied")

    @staticmethod
    def check_executable(name):
        """
        Returns:
            str: Resolved path of the executable.
        """
        resolved = shutil.which(name)
        if resolved is None:
            raise ConfigError(f"{name}: command not found")
        return resolved


class ArgumentParser(argparse.ArgumentParser):
    """argparse with the tools' usage-error convention: message, hint, exit status 1."""

    def error(self, message):
        sys.stderr.write(f"{self.prog}: {message}\n")
        sys.stderr.write(f"Try '{self.prog} --help' for more information.\n")
        sys.exit(1)
