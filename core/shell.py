"""Command executor shared by the sudo and SSH channels.

Commands are always passed to the child as a discrete argument vector.
Nothing here ever goes through ``/bin/sh -c``.
"""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, Iterator, List, Optional, Sequence, Tuple

from core.errors import CommandFailure

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")


@dataclass
class ShellResult:
    """Raw outcome of one child process."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def combined_output(self) -> str:
        parts = [p for p in (self.stdout, self.stderr) if p]
        return "\n".join(part.rstrip("\n") for part in parts)

    def __iter__(self):
        # Allows ``out, err, code = execute(...)``.
        return iter((self.stdout, self.stderr, self.returncode))


def build_command(program: str, args: Sequence[object]) -> List[str]:
    return [str(program)] + [str(a) for a in args]


def _audit(cmd: List[str], returncode: Optional[int], started: float) -> None:
    if not audit_logger.handlers:
        return
    event = {
        "ts": time.time(),
        "command": cmd,
        "returncode": returncode,
        "duration_ms": int((time.time() - started) * 1000),
    }
    audit_logger.info(json.dumps(event, ensure_ascii=False, sort_keys=True))


def execute(
    program: str,
    args: Sequence[object] = (),
    *,
    input_text: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ShellResult:
    """Run ``program`` with ``args`` and return stdout, stderr and exit code.

    A non-zero exit is not an error at this level. ``OSError`` (program
    missing, not executable) and ``subprocess.TimeoutExpired`` propagate.
    """
    cmd = build_command(program, args)
    logger.debug("Executing %s", shlex.join(cmd))
    started = time.time()
    returncode: Optional[int] = None
    try:
        completed = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            input=input_text,
            timeout=timeout,
            check=False,
        )
        returncode = completed.returncode
    finally:
        _audit(cmd, returncode, started)
    return ShellResult(
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        returncode=int(completed.returncode),
    )


def capture(
    program: str,
    args: Sequence[object] = (),
    *,
    input_text: Optional[str] = None,
    timeout: Optional[float] = None,
    stdout_in_error: bool = True,
) -> str:
    """Run a command and return only its stdout.

    Raises ``CommandFailure`` on a non-zero exit, and also when the command
    cannot be started or times out. With ``stdout_in_error=False`` the
    failure carries stderr only, for commands whose stdout may echo secrets.
    """
    cmd = build_command(program, args)
    try:
        result = execute(program, args, input_text=input_text, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise CommandFailure(cmd, f"timed out after {e.timeout} seconds") from e
    except OSError as e:
        raise CommandFailure(cmd, str(e)) from e
    if not result.ok:
        output = result.combined_output if stdout_in_error else result.stderr
        raise CommandFailure(cmd, output, result.returncode)
    return result.stdout


@contextmanager
def spooled(
    program: str,
    args: Sequence[object] = (),
    *,
    timeout: Optional[float] = None,
) -> Iterator[Tuple[int, IO[str], IO[str]]]:
    """Run a command with stdout/stderr spooled to temporary files.

    Yields ``(returncode, stdout, stderr)`` once the child has exited, with
    both streams rewound to the start. Both files are closed when the block
    exits, whatever the outcome.
    """
    cmd = build_command(program, args)
    logger.debug("Executing (spooled) %s", shlex.join(cmd))
    started = time.time()
    returncode: Optional[int] = None
    with tempfile.TemporaryFile(
        mode="w+", encoding="utf-8", errors="replace"
    ) as out, tempfile.TemporaryFile(mode="w+", encoding="utf-8", errors="replace") as err:
        try:
            proc = subprocess.Popen(cmd, stdin=subprocess.DEVNULL, stdout=out, stderr=err, text=True)
            try:
                returncode = proc.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.wait()
                raise
        finally:
            _audit(cmd, returncode, started)
        out.seek(0)
        err.seek(0)
        yield int(returncode), out, err
