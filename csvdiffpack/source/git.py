"""Read committed CSV snapshots and working tree changes through the git CLI."""

from __future__ import annotations

from pathlib import Path
import subprocess

from csvdiffpack.core.models import Table
from csvdiffpack.source.csv_reader import decode_csv_bytes, parse_csv, read_csv_file
from csvdiffpack.source.dialect import DEFAULT_DIALECT, CsvDialect
from csvdiffpack.source.exceptions import GitError, GitSnapshotError

DEFAULT_REV = "HEAD"
_CSV_SUFFIX = ".csv"


def _run_git(args: list[str], *, cwd: Path, text: bool = True) -> subprocess.CompletedProcess:
    command = ["git", *args]
    try:
        return subprocess.run(
            command,
            cwd=str(cwd),
            capture_output=True,
            text=text,
            check=False,
        )
    except FileNotFoundError as error:
        raise GitError("git executable not found on PATH") from error
    except NotADirectoryError as error:
        raise GitError(f"not a directory: {cwd}") from error


def _stderr_text(completed: subprocess.CompletedProcess) -> str:
    stderr = completed.stderr or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return stderr.strip() or f"git exited with code {completed.returncode}"


def find_repository_root(path: str | Path) -> Path:
    target = Path(path).resolve()
    cwd = target if target.is_dir() else target.parent
    if not cwd.exists():
        raise GitError(f"directory not found: {cwd}")

    completed = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    if completed.returncode != 0:
        raise GitError(f"not a git repository: {cwd} ({_stderr_text(completed)})")
    return Path(completed.stdout.strip()).resolve()


def repository_relative_path(path: str | Path, root: Path) -> str:
    target = Path(path).resolve()
    try:
        return target.relative_to(root).as_posix()
    except ValueError as error:
        raise GitError(f"{target} is outside repository {root}") from error


def read_git_snapshot_bytes(path: str | Path, *, rev: str = DEFAULT_REV) -> bytes:
    """Raw content of `path` as committed at `rev`."""
    root = find_repository_root(path)
    relative = repository_relative_path(path, root)
    completed = _run_git(["show", f"{rev}:{relative}"], cwd=root, text=False)
    if completed.returncode != 0:
        raise GitSnapshotError(relative, rev, _stderr_text(completed))
    return completed.stdout


def read_git_snapshot(
    path: str | Path,
    *,
    rev: str = DEFAULT_REV,
    dialect: CsvDialect = DEFAULT_DIALECT,
) -> str:
    payload = read_git_snapshot_bytes(path, rev=rev)
    return decode_csv_bytes(payload, dialect, source=f"{rev}:{Path(path).name}")


def list_changed_csv_files(root: str | Path) -> list[Path]:
    """Working tree CSV changes under `root`: modified, deleted and untracked."""
    base = Path(root).resolve()
    repo_root = find_repository_root(base)
    completed = _run_git(
        ["status", "--porcelain=v1", "-z", "--untracked-files=all"],
        cwd=repo_root,
    )
    if completed.returncode != 0:
        raise GitError(f"git status failed: {_stderr_text(completed)}")

    changed: set[Path] = set()
    for status, relative in _parse_porcelain_z(completed.stdout):
        if status != "??" and status[1] == " ":
            continue
        if not relative.lower().endswith(_CSV_SUFFIX):
            continue
        candidate = repo_root / relative
        if candidate == base or base in candidate.parents:
            changed.add(candidate)
    return sorted(changed)


def _parse_porcelain_z(output: str) -> list[tuple[str, str]]:
    entries: list[tuple[str, str]] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if len(token) < 4:
            continue
        status, relative = token[:2], token[3:]
        entries.append((status, relative))
        # Renames and copies carry the original path as the next token.
        if "R" in status or "C" in status:
            index += 1
    return entries


def load_head_and_current(
    path: str | Path,
    *,
    rev: str = DEFAULT_REV,
    dialect: CsvDialect = DEFAULT_DIALECT,
    allow_missing: bool = True,
) -> tuple[Table, Table]:
    """Committed table at `rev` and the table currently on disk.

    With `allow_missing`, a path absent at `rev` (a new file) reads as an empty
    old table. A file deleted from disk always reads as an empty new table.
    """
    target = Path(path)
    try:
        old = parse_csv(read_git_snapshot(target, rev=rev, dialect=dialect), dialect)
    except GitSnapshotError:
        if not allow_missing:
            raise
        old = Table()

    new = read_csv_file(target, dialect) if target.exists() else Table()
    return old, new
