"""File inclusion. Paths are taken literally (relative to the working directory, never canonicalized), and a path is
included at most once per run, which also stops include cycles.
"""

from falconlike.lang.error import ResourceError
from falconlike.lang.lexical import parse


def read_source(path):
    """Returns the lines of the file at path, or raises a ResourceError if it can't be read."""
    try:
        with open(path, "r", encoding="utf-8") as file:
            return file.read().splitlines()
    except (OSError, UnicodeDecodeError) as error:
        reason = error.strerror if isinstance(error, OSError) and error.strerror else str(error)
        raise ResourceError("'{}' could not be opened: {}", (path, reason)) from None


class IncludeResolver:
    """Keeps track of included files for one run."""

    def __init__(self, error_handler=None):
        self.error_handler = error_handler  # for parse warnings
        self.included = set()

    def mark(self, path):
        """Marks path as included without loading it (the file being run, for instance)."""
        self.included.add(path)

    def resolve(self, path):
        """Returns the parsed block of the file at path, or None if path was included before. A file that can't be
        read raises a ResourceError and is not marked as included.
        """
        if path in self.included:
            return None

        lines = read_source(path)
        self.mark(path)
        return parse(lines, path, self.error_handler)
