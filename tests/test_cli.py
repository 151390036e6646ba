"""Unit tests for zymproc.cli."""

import os
import sys
from unittest.mock import MagicMock, patch

import pytest

from zymproc.cli import entrypoint, main
from zymproc.errors import ProcessConfigError
from zymproc.models import ExecResult, SpawnFailure


def _run_patches(result):
    return patch("zymproc.cli.run.execute", MagicMock(return_value=result))


class TestRunCommand:
    def test_relays_output_and_exit_code(self, capsys):
        code = main(["run", sys.executable, "-c", "import sys; print('hi'); sys.exit(2)"])
        out = capsys.readouterr().out
        assert code == 2
        assert out.strip() == "hi"

    def test_run_keyword_is_optional(self, capsys):
        with _run_patches(ExecResult(stdout=b"ok\n", stderr=b"", exit_code=0)) as mock_execute:
            assert main(["echo", "ok"]) == 0
        mock_execute.assert_called_once()
        assert mock_execute.call_args[0][:2] == ("echo", ["ok"])
        assert capsys.readouterr().out == "ok\n"

    def test_program_options_not_parsed_as_ours(self):
        with _run_patches(ExecResult(stdout=b"", stderr=b"", exit_code=0)) as mock_execute:
            main(["run", "ls", "-la", "--color", "auto"])
        assert mock_execute.call_args[0][:2] == ("ls", ["-la", "--color", "auto"])

    def test_stream_modes_forwarded(self):
        with _run_patches(ExecResult(stdout=b"", stderr=b"", exit_code=0)) as mock_execute:
            main(["run", "--cwd", "/tmp", "--stdout", "pty", "--stderr", "null", "ls"])
        options = mock_execute.call_args[0][2]
        assert options == {"cwd": "/tmp", "stdin": None, "stdout": "pty", "stderr": "null"}

    def test_stderr_relayed(self, capsys):
        with _run_patches(ExecResult(stdout=b"", stderr=b"warn\n", exit_code=0)):
            main(["run", "ls"])
        assert capsys.readouterr().err == "warn\n"

    def test_spawn_failure_exits_127(self, capsys):
        with _run_patches(SpawnFailure("Failed to spawn process: command not found: nope")):
            assert main(["run", "nope"]) == 127
        assert "Error: Failed to spawn process" in capsys.readouterr().err

    def test_process_error_exits_1(self, capsys):
        failing = MagicMock(side_effect=ProcessConfigError("bad option"))
        with patch("zymproc.cli.run.execute", failing):
            assert main(["run", "ls"]) == 1
        assert "Error: bad option" in capsys.readouterr().err

    def test_invalid_mode_rejected_by_parser(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "--stdout", "file", "ls"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-V"])
        assert exc_info.value.code == 0
        assert "zymproc" in capsys.readouterr().out


class TestInfoCommand:
    def test_prints_process_info(self, capsys):
        assert main(["info"]) == 0
        out = capsys.readouterr().out
        assert f"pid: {os.getpid()}" in out
        assert f"ppid: {os.getppid()}" in out
        assert "cwd: " in out
        assert "env:" not in out

    def test_env_flag(self, capsys, monkeypatch):
        monkeypatch.setenv("ZYMPROC_INFO_TEST", "visible")
        main(["info", "--env"])
        assert "ZYMPROC_INFO_TEST=visible" in capsys.readouterr().out


class TestEntrypoint:
    def test_raises_system_exit_with_main_result(self):
        with patch("zymproc.cli.app.main", return_value=5):
            with pytest.raises(SystemExit) as exc_info:
                entrypoint()
        assert exc_info.value.code == 5
