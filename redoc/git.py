# redoc/git.py
"""Build a ChangeContext from the local git repository."""

import logging
import subprocess
from pathlib import Path

from redoc.ai.types import ChangeContext, Commit

logger = logging.getLogger(__name__)

DEFAULT_RANGE = "HEAD~1..HEAD"
GIT_TIMEOUT = 30

# Unit/record separators keep multi-line commit bodies intact
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"


def _git(args: list[str], cwd: Path | str | None = None) -> str:
    """
    Run a git command and return stdout.

    Raises:
        RuntimeError: If git is missing or exits non-zero (message carries stderr)
    """
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            cwd=cwd,
            timeout=GIT_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise RuntimeError(f"git {' '.join(args)} failed: {e}") from e

    if result.returncode != 0:
        raise RuntimeError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout


def parse_log(output: str) -> tuple[Commit, ...]:
    """Parse `git log --format=%H<US>%B<RS>` output, newest first."""
    commits: list[Commit] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip()
        if not record:
            continue
        sha, _, message = record.partition(_FIELD_SEP)
        commits.append(Commit(hash=sha.strip(), message=message.strip()))
    return tuple(commits)


def build_change_context(
    rev_range: str = DEFAULT_RANGE,
    cwd: Path | str | None = None,
) -> ChangeContext:
    """
    Collect branch, commits, changed files and diff for a revision range.

    Args:
        rev_range: Any range `git log`/`git diff` accept (default: last commit)
        cwd: Repository directory (default: current directory)

    Returns:
        ChangeContext with files sorted alphabetically

    Raises:
        RuntimeError: If any git command fails
    """
    branch = _git(["rev-parse", "--abbrev-ref", "HEAD"], cwd).strip()
    log = _git(["log", f"--format=%H{_FIELD_SEP}%B{_RECORD_SEP}", rev_range], cwd)
    names = _git(["diff", "--name-only", rev_range], cwd)
    diff = _git(["diff", rev_range], cwd)

    files = tuple(sorted({line.strip() for line in names.splitlines() if line.strip()}))
    commits = parse_log(log)
    logger.info(f"Change context {rev_range}: {len(commits)} commit(s), {len(files)} file(s)")

    return ChangeContext(branch=branch, commits=commits, files=files, diff=diff)
