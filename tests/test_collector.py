"""
Tests for dev-command capture.
Real subprocesses, using the running interpreter as a stand-in dev server.
"""

import sys

import pytest

from devanalyzer.collector import (
    TIMEOUT_MESSAGE,
    read_log_file,
    resolve_dev_command,
    run_dev_with_logs,
)
from devanalyzer.detector import FrameworkInfo, ManagerResult
from devanalyzer.errors import CollectorError
from devanalyzer.patterns import LogSource

NPM = ManagerResult(package_manager="npm", framework=FrameworkInfo("Next.js"))


class TestResolveDevCommand:
    @pytest.mark.parametrize("manager", ["npm", "pnpm", "yarn", "bun"])
    def test_known_managers_run_dev_script(self, manager):
        assert resolve_dev_command(manager) == [manager, "run", "dev"]

    def test_unknown_manager_falls_back_to_npm(self):
        assert resolve_dev_command("unknown") == ["npm", "run", "dev"]

    def test_explicit_command(self):
        assert resolve_dev_command("pnpm", "next", ["dev", "-p", "4000"]) == ["next", "dev", "-p", "4000"]


class TestRunDevWithLogs:
    def test_captures_both_streams(self, tmp_path):
        script = (
            "import sys\n"
            "print('- event compiled successfully in 5 ms', flush=True)\n"
            "print('- warn careful', file=sys.stderr, flush=True)\n"
        )
        seen = []

        result = run_dev_with_logs(
            tmp_path, NPM, command=sys.executable, args=["-c", script], on_log=seen.append,
        )

        assert result.exit_code == 0
        assert not result.interrupted
        assert not result.timed_out
        by_source = {entry.source: entry.text for entry in result.logs}
        assert by_source[LogSource.STDOUT] == "- event compiled successfully in 5 ms"
        assert by_source[LogSource.STDERR] == "- warn careful"
        assert [e.sequence for e in result.logs] == [0, 1]
        assert seen == result.logs

    def test_non_zero_exit_code_reported(self, tmp_path):
        result = run_dev_with_logs(tmp_path, NPM, command=sys.executable, args=["-c", "raise SystemExit(3)"])
        assert result.exit_code == 3
        assert result.logs == []

    def test_timeout_stops_process(self, tmp_path):
        script = "import time\nprint('ready', flush=True)\ntime.sleep(30)\n"

        result = run_dev_with_logs(tmp_path, NPM, command=sys.executable, args=["-c", script], timeout=2)

        assert result.timed_out
        assert result.exit_code != 0
        assert result.logs[-1].text == TIMEOUT_MESSAGE.format(seconds=2)

    def test_missing_binary_raises(self, tmp_path):
        with pytest.raises(CollectorError, match="Could not run"):
            run_dev_with_logs(tmp_path, NPM, command="definitely-not-a-dev-server-binary")


class TestReadLogFile:
    def test_lines_numbered_as_stdout(self, tmp_path):
        path = tmp_path / "dev.log"
        path.write_text("- wait compiling /a...\r\n- event compiled successfully in 1s\n", encoding="utf-8")

        logs = read_log_file(path)

        assert [e.text for e in logs] == ["- wait compiling /a...", "- event compiled successfully in 1s"]
        assert {e.source for e in logs} == {LogSource.STDOUT}
        assert [e.sequence for e in logs] == [0, 1]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.log"
        path.write_text("", encoding="utf-8")
        assert read_log_file(path) == []

    def test_only_newlines_split_lines(self, tmp_path):
        path = tmp_path / "dev.log"
        path.write_text("- warn a\x0bb\x0cc\x1dd e\n- ready\n", encoding="utf-8")

        logs = read_log_file(path)

        assert [e.text for e in logs] == ["- warn a\x0bb\x0cc\x1dd e", "- ready"]

    def test_blank_lines_kept(self, tmp_path):
        path = tmp_path / "dev.log"
        path.write_text("a\n\nb", encoding="utf-8")
        assert [e.text for e in read_log_file(path)] == ["a", "", "b"]
