"""Table sources: CSV text, files on disk and git snapshots."""

from csvdiffpack.source.csv_reader import parse_csv, read_csv_file
from csvdiffpack.source.dialect import (
    DEFAULT_DIALECT,
    DELIMITER_ENV_VAR,
    ENCODING_ENV_VAR,
    QUOTECHAR_ENV_VAR,
    CsvDialect,
    build_dialect,
    dialect_from_config,
    dialect_from_env,
    load_dialect_from_file,
)
from csvdiffpack.source.exceptions import (
    CsvParseError,
    DialectConfigError,
    GitError,
    GitSnapshotError,
    SourceError,
)
from csvdiffpack.source.git import (
    DEFAULT_REV,
    find_repository_root,
    list_changed_csv_files,
    load_head_and_current,
    read_git_snapshot,
)

__all__ = [
    "CsvDialect",
    "DEFAULT_DIALECT",
    "DEFAULT_REV",
    "DELIMITER_ENV_VAR",
    "QUOTECHAR_ENV_VAR",
    "ENCODING_ENV_VAR",
    "SourceError",
    "CsvParseError",
    "GitError",
    "GitSnapshotError",
    "DialectConfigError",
    "build_dialect",
    "dialect_from_config",
    "dialect_from_env",
    "load_dialect_from_file",
    "parse_csv",
    "read_csv_file",
    "read_git_snapshot",
    "find_repository_root",
    "list_changed_csv_files",
    "load_head_and_current",
]
