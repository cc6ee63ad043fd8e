from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass
class CmdResult:
    returncode: int
    stdout: bytes
    stderr: bytes


def run_command(argv: Sequence[str], timeout_sec: float | None = None) -> CmdResult:
    """Run a command without a shell and wait for it, returning stdout/stderr as bytes.

    Raises OSError if the executable cannot be launched. A timeout kills the
    child and reports returncode 124.
    """
    log.debug("Running: %s", shlex.join(argv))
    try:
        proc = subprocess.run(list(argv), capture_output=True, timeout=timeout_sec, check=False)
    except subprocess.TimeoutExpired as e:
        return CmdResult(
            returncode=124,
            stdout=e.stdout or b"",
            stderr=f"Timeout after {timeout_sec}s".encode(),
        )
    return CmdResult(returncode=proc.returncode, stdout=proc.stdout or b"", stderr=proc.stderr or b"")


def first_line(data: bytes, limit: int = 200) -> str:
    """First non-empty line of process output, for single-line diagnostics."""
    text = data.decode("utf-8", errors="replace")
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line[:limit]
    return ""
