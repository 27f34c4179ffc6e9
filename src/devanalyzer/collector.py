"""Run the project's dev command and capture its output line by line."""

from __future__ import annotations

import logging
import os
import subprocess
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Callable

from devanalyzer.detector import ManagerResult, detect_manager
from devanalyzer.errors import CollectorError
from devanalyzer.models import LogLine
from devanalyzer.patterns import LogSource

logger = logging.getLogger(__name__)

INTERRUPT_MESSAGE = "[dev-analyzer] interrupted, stopping dev process..."
TIMEOUT_MESSAGE = "[dev-analyzer] timed out after {seconds:g}s, stopping dev process..."

# Seconds to wait after SIGTERM before SIGKILL
_TERMINATE_GRACE = 5.0


@dataclass
class DevCommandResult:
    """Outcome of a dev-server run."""
    exit_code: int | None
    logs: list[LogLine] = field(default_factory=list)
    interrupted: bool = False
    timed_out: bool = False


def resolve_dev_command(
    manager: str,
    command: str | None = None,
    args: list[str] | None = None,
) -> list[str]:
    """``<manager> run dev`` unless an explicit command is given."""
    if command:
        return [command, *(args or [])]
    if manager in ("pnpm", "yarn", "bun", "npm"):
        return [manager, "run", "dev"]
    return ["npm", "run", "dev"]


class _LineSink:
    """Collects lines from several reader threads in arrival order."""

    def __init__(self, on_log: Callable[[LogLine], None] | None):
        self.logs: list[LogLine] = []
        self._on_log = on_log
        self._lock = threading.Lock()

    def add(self, source: LogSource, text: str) -> None:
        with self._lock:
            entry = LogLine(
                source=source,
                text=text,
                sequence=len(self.logs),
                captured_at=time.time(),
            )
            self.logs.append(entry)
            if self._on_log:
                self._on_log(entry)

    def drain(self, stream: IO[str], source: LogSource) -> None:
        for raw in stream:
            self.add(source, raw.rstrip("\r\n"))
        stream.close()


def _stop(proc: subprocess.Popen) -> None:
    proc.terminate()
    try:
        proc.wait(timeout=_TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        logger.warning("Dev process ignored SIGTERM, killing it")
        proc.kill()
        proc.wait()


def run_dev_with_logs(
    cwd: str | Path = ".",
    manager_result: ManagerResult | None = None,
    command: str | None = None,
    args: list[str] | None = None,
    on_log: Callable[[LogLine], None] | None = None,
    timeout: float | None = None,
) -> DevCommandResult:
    """Spawn the dev command, draining stdout and stderr concurrently.

    Ctrl+C or ``timeout`` stops the child and the run still returns the
    lines captured so far.

    Raises:
        CollectorError: if the command cannot be started.
    """
    root = Path(cwd).resolve()
    manager = manager_result or detect_manager(root)
    cmd = resolve_dev_command(manager.package_manager, command, args)
    logger.debug("Running %s in %s", " ".join(cmd), root)

    try:
        proc = subprocess.Popen(
            cmd,
            cwd=root,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            env={**os.environ, "FORCE_COLOR": "1"},
        )
    except OSError as exc:
        raise CollectorError(f"Could not run '{' '.join(cmd)}': {exc}") from exc

    sink = _LineSink(on_log)
    readers = [
        threading.Thread(target=sink.drain, args=(proc.stdout, LogSource.STDOUT), daemon=True),
        threading.Thread(target=sink.drain, args=(proc.stderr, LogSource.STDERR), daemon=True),
    ]
    for t in readers:
        t.start()

    result = DevCommandResult(exit_code=None)
    try:
        proc.wait(timeout=timeout)
    except KeyboardInterrupt:
        sink.add(LogSource.STDOUT, INTERRUPT_MESSAGE)
        result.interrupted = True
        _stop(proc)
    except subprocess.TimeoutExpired:
        sink.add(LogSource.STDOUT, TIMEOUT_MESSAGE.format(seconds=timeout))
        result.timed_out = True
        _stop(proc)

    for t in readers:
        t.join()

    result.exit_code = proc.returncode
    result.logs = sink.logs
    return result


def read_log_file(path: str | Path) -> list[LogLine]:
    """Load a saved dev-server log as stdout lines."""
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    # Split on newlines only, the way the live reader threads do
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [
        LogLine(source=LogSource.STDOUT, text=line.rstrip("\r"), sequence=i)
        for i, line in enumerate(lines)
    ]
