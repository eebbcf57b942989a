"""Platform abstraction layer."""

from .files import atomic_write_bytes, remove_tree
from .process import ProcessError, run, run_silent, which

__all__ = [
    # files
    "atomic_write_bytes",
    "remove_tree",
    # process
    "ProcessError",
    "run",
    "run_silent",
    "which",
]
