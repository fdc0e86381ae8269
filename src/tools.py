"""Common utility functions for the project."""

import logging
import os
import time

_log = logging.getLogger(__name__)


def env_flag(key: str) -> bool:
    """Return True when an environment variable is set to a non-empty value.

    Mirrors the shell convention used by the build scripts, where
    ``NO_MINIFY=1 pelican content`` switches a feature off.

    Args:
        key: The environment variable name to check

    Returns:
        True if the variable exists and is not empty
    """
    return bool(os.environ.get(key))


class Benchmark:
    """Context manager logging how long a build step took.

    Example:
        with Benchmark("html_transform > index.html"):
            ...
    """

    def __init__(self, label: str, logger: logging.Logger | None = None):
        self.label = label
        self.logger = logger or _log
        self.elapsed = 0.0
        self._start = 0.0

    def __enter__(self):
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed = time.perf_counter() - self._start
        if exc_type is None:
            self.logger.debug(f"[benchmark] {self.label}: {self.elapsed * 1000:.1f}ms")
        return False
