import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class _BelowWarning(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.WARNING


def setup_logging(name=None, level=logging.INFO):
    """
    Progress logging for the my2mo tools.

    INFO and DEBUG go to stdout, warnings and errors to stderr, so a failed
    table stands out from the progress lines. LOG_LEVEL overrides `level`;
    LOG_FILE adds a copy of everything in a file.

    Per-table results of an import are not logged here; they go to
    mongoimport.log (see import_log.py).
    """
    logger = logging.getLogger(name or "my2mo")

    # Already configured by an earlier import
    if logger.handlers:
        return logger

    env_level = os.getenv("LOG_LEVEL")
    logger.setLevel(env_level.upper() if env_level else level)
    logger.propagate = False
    formatter = logging.Formatter(LOG_FORMAT)

    out = logging.StreamHandler(sys.stdout)
    out.setLevel(logging.DEBUG)
    out.addFilter(_BelowWarning())
    out.setFormatter(formatter)
    logger.addHandler(out)

    err = logging.StreamHandler(sys.stderr)
    err.setLevel(logging.WARNING)
    err.setFormatter(formatter)
    logger.addHandler(err)

    log_file = os.getenv("LOG_FILE")
    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger

# Shared by every module
logger = setup_logging()
