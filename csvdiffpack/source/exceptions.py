"""Errors raised while obtaining table content."""


class SourceError(Exception):
    """Base class for errors reading a table snapshot."""


class CsvParseError(SourceError):
    """Delimited text is malformed or not decodable."""


class GitError(SourceError):
    """git is unavailable or a git command failed."""


class GitSnapshotError(GitError):
    """A path has no content at the requested revision."""

    def __init__(self, path: str, rev: str, reason: str) -> None:
        self.path = path
        self.rev = rev
        self.reason = reason
        super().__init__(f"Cannot read '{path}' at {rev}: {reason}")


class DialectConfigError(ValueError):
    """Raised when a CSV dialect config payload is invalid."""
