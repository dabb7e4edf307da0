"""
Tests for the subprocess runner — the one place tools are spawned.

These run the current interpreter as the "external tool".
"""

import os
import sys

import pytest

from hyperon_provision.adapters.shell.command import (
    COMMAND_NOT_FOUND,
    ToolInvocationError,
    run_command,
    sudo_prefix,
)


class TestRunCommand:
    def test_success(self):
        result = run_command([sys.executable, "-c", "print('hi')"], capture=True)
        assert result.return_code == 0
        assert result.stdout.strip() == "hi"
        assert result.elapsed_ms >= 0

    def test_nonzero_exit_raises_with_status(self):
        with pytest.raises(ToolInvocationError) as exc:
            run_command([sys.executable, "-c", "import sys; sys.exit(3)"])
        assert exc.value.return_code == 3
        assert exc.value.exit_code == 3
        assert "exited with status 3" in str(exc.value)

    def test_captured_stderr_in_message(self):
        code = "import sys; sys.stderr.write('boom'); sys.exit(2)"
        with pytest.raises(ToolInvocationError) as exc:
            run_command([sys.executable, "-c", code], capture=True)
        assert exc.value.stderr == "boom"
        assert str(exc.value).endswith(": boom")

    def test_missing_executable(self):
        with pytest.raises(ToolInvocationError) as exc:
            run_command(["definitely-not-a-real-tool-xyz"])
        assert exc.value.return_code == COMMAND_NOT_FOUND

    def test_cwd_and_env(self, tmp_path):
        env = dict(os.environ, HPV_PROBE="42")
        code = "import os; print(os.getcwd()); print(os.environ['HPV_PROBE'])"
        result = run_command([sys.executable, "-c", code], cwd=tmp_path, env=env, capture=True)
        cwd, value = result.stdout.split()
        assert os.path.realpath(cwd) == os.path.realpath(tmp_path)
        assert value == "42"

    def test_signal_exit_maps_to_one(self):
        err = ToolInvocationError(["x"], -9)
        assert err.return_code == -9
        assert err.exit_code == 1


class TestSudoPrefix:
    def test_not_requested(self):
        assert sudo_prefix(["apt-get", "update"], False) == ["apt-get", "update"]

    def test_as_root(self, monkeypatch):
        monkeypatch.setattr(os, "geteuid", lambda: 0)
        assert sudo_prefix(["apt-get", "update"], True) == ["apt-get", "update"]

    def test_as_user(self, monkeypatch):
        monkeypatch.setattr(os, "geteuid", lambda: 1000)
        assert sudo_prefix(["apt-get", "update"], True) == ["sudo", "apt-get", "update"]
