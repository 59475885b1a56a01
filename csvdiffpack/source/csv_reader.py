"""Tokenize delimited text into tables."""

from __future__ import annotations

import csv
import io
from pathlib import Path

from csvdiffpack.core.models import Table
from csvdiffpack.source.dialect import DEFAULT_DIALECT, CsvDialect
from csvdiffpack.source.exceptions import CsvParseError

_BOM = "\ufeff"


def parse_csv(content: str, dialect: CsvDialect = DEFAULT_DIALECT) -> Table:
    """Parse delimited text into a table.

    Empty lines are skipped and cells are kept verbatim (no trimming). Quoting
    is strict: text after a closing quote, or an unterminated quoted cell, is
    an error.
    """
    if content.startswith(_BOM):
        content = content[len(_BOM):]

    reader = csv.reader(
        io.StringIO(content),
        delimiter=dialect.delimiter,
        quotechar=dialect.quotechar,
        strict=True,
    )
    rows: list[list[str]] = []
    try:
        for row in reader:
            if not row:
                continue
            rows.append(row)
    except csv.Error as error:
        raise CsvParseError(f"Failed to parse CSV (line {reader.line_num}): {error}") from error

    return Table.from_rows(rows)


def decode_csv_bytes(payload: bytes, dialect: CsvDialect = DEFAULT_DIALECT, *, source: str) -> str:
    try:
        return payload.decode(dialect.encoding)
    except UnicodeDecodeError as error:
        raise CsvParseError(
            f"Failed to parse CSV: {source} is not valid {dialect.encoding} text"
        ) from error


def read_csv_file(path: str | Path, dialect: CsvDialect = DEFAULT_DIALECT) -> Table:
    """Read and parse a CSV file. Missing files raise FileNotFoundError."""
    target = Path(path)
    content = decode_csv_bytes(target.read_bytes(), dialect, source=str(target))
    return parse_csv(content, dialect)
