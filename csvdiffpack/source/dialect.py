"""CSV dialect settings: defaults, environment overrides and JSON config."""

from __future__ import annotations

import codecs
import json
from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Any, Mapping

from csvdiffpack.source.exceptions import DialectConfigError

DELIMITER_ENV_VAR = "CSVDIFFKIT_DELIMITER"
QUOTECHAR_ENV_VAR = "CSVDIFFKIT_QUOTECHAR"
ENCODING_ENV_VAR = "CSVDIFFKIT_ENCODING"

_SUPPORTED_KEYS = frozenset({"delimiter", "quotechar", "encoding"})


@dataclass(frozen=True, slots=True)
class CsvDialect:
    """How delimited text is tokenized. Defaults read `;`-separated files."""

    delimiter: str = ";"
    quotechar: str = '"'
    encoding: str = "utf-8"

    def to_dict(self) -> dict[str, str]:
        return {
            "delimiter": self.delimiter,
            "quotechar": self.quotechar,
            "encoding": self.encoding,
        }


DEFAULT_DIALECT = CsvDialect()


def build_dialect(
    *,
    delimiter: str | None = None,
    quotechar: str | None = None,
    encoding: str | None = None,
    base: CsvDialect = DEFAULT_DIALECT,
) -> CsvDialect:
    """Return `base` with the given fields replaced, after validation."""
    changes: dict[str, str] = {}
    if delimiter is not None:
        changes["delimiter"] = _single_char(delimiter, key="delimiter")
    if quotechar is not None:
        changes["quotechar"] = _single_char(quotechar, key="quotechar")
    if encoding is not None:
        changes["encoding"] = _encoding(encoding)

    dialect = replace(base, **changes)
    if dialect.delimiter == dialect.quotechar:
        raise DialectConfigError("delimiter and quotechar must differ.")
    return dialect


def dialect_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    base: CsvDialect = DEFAULT_DIALECT,
) -> CsvDialect:
    env = os.environ if environ is None else environ
    return build_dialect(
        delimiter=_env_value(env, DELIMITER_ENV_VAR),
        quotechar=_env_value(env, QUOTECHAR_ENV_VAR),
        encoding=_env_value(env, ENCODING_ENV_VAR),
        base=base,
    )


def dialect_from_config(
    config: Mapping[str, Any],
    *,
    base: CsvDialect = DEFAULT_DIALECT,
) -> CsvDialect:
    unknown = sorted(set(config.keys()) - _SUPPORTED_KEYS)
    if unknown:
        raise DialectConfigError("Unsupported dialect config keys: " + ", ".join(unknown))

    values: dict[str, str | None] = {}
    for key in sorted(_SUPPORTED_KEYS):
        value = config.get(key)
        if value is not None and not isinstance(value, str):
            raise DialectConfigError(f"Dialect config key '{key}' must be a string.")
        values[key] = value

    return build_dialect(
        delimiter=values["delimiter"],
        quotechar=values["quotechar"],
        encoding=values["encoding"],
        base=base,
    )


def load_dialect_from_file(path: str | Path, *, base: CsvDialect = DEFAULT_DIALECT) -> CsvDialect:
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise DialectConfigError(f"Invalid dialect config JSON ({config_path}): {error}") from error
    if not isinstance(raw, dict):
        raise DialectConfigError(f"Dialect config must be a JSON object ({config_path}).")
    return dialect_from_config(raw, base=base)


def _env_value(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name)
    if value is None or value == "":
        return None
    return value


def _single_char(value: str, *, key: str) -> str:
    if value == "\\t":
        value = "\t"
    if len(value) != 1:
        raise DialectConfigError(f"{key} must be a single character, got {value!r}.")
    if value in "\r\n":
        raise DialectConfigError(f"{key} cannot be a line break.")
    return value


def _encoding(value: str) -> str:
    normalized = value.strip()
    try:
        codecs.lookup(normalized)
    except LookupError as error:
        raise DialectConfigError(f"Unknown encoding: {value!r}") from error
    return normalized
