"""
Logging setup. The package logs to LOG from constants, this just adds
somewhere for it to go.
"""
import logging
from pathlib import Path

from .constants import LOG

FORMAT = '%(asctime)s %(levelname)-7s %(message)s'


def get_timelog(fpath=None, level=logging.INFO):
    """
    Return LOG with a timestamped handler attached: a file handler if
    fpath is passed, else stderr.

    >>> LOG = get_timelog('logs/main.log')
    """
    if fpath is not None:
        fpath = Path(fpath)
        fpath.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(fpath)
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(logging.Formatter(FORMAT))
    LOG.addHandler(handler)
    LOG.setLevel(level)

    return LOG
