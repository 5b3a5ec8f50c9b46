"""Tests for crontab schedule install/remove."""

import os
import shlex
import subprocess
from unittest.mock import patch

import pytest

from ttrpg_session_logger.scheduler import CronScheduler, default_command


class FakeCrontab:
    """Stands in for the crontab binary via subprocess.run."""

    def __init__(self, lines=None, missing=False):
        self.content = "\n".join(lines) + "\n" if lines else ""
        self.missing = missing
        self.writes = 0

    def run(self, cmd, input=None, capture_output=False, text=False):
        if cmd[1] == "-l":
            if self.missing:
                return subprocess.CompletedProcess(
                    cmd, 1, stdout="", stderr="no crontab for user\n"
                )
            return subprocess.CompletedProcess(cmd, 0, stdout=self.content, stderr="")
        self.content = input
        self.missing = False
        self.writes += 1
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    @property
    def lines(self):
        return self.content.splitlines()


@pytest.fixture
def scheduler():
    return CronScheduler(command="/usr/bin/log-sessions", name="session-log")


def test_install_into_empty_crontab(scheduler):
    fake = FakeCrontab(missing=True)
    with patch("subprocess.run", side_effect=fake.run):
        entry = scheduler.install()

    assert entry == "0 0 * * * /usr/bin/log-sessions # session-log"
    assert fake.lines == [entry]


def test_install_is_idempotent(scheduler):
    """Installing twice leaves exactly one entry."""
    fake = FakeCrontab(["MAILTO=me@example.com", "30 6 * * * backup.sh"])
    with patch("subprocess.run", side_effect=fake.run):
        scheduler.install()
        scheduler.install()

    assert fake.lines == [
        "MAILTO=me@example.com",
        "30 6 * * * backup.sh",
        "0 0 * * * /usr/bin/log-sessions # session-log",
    ]


def test_install_replaces_previous_command(scheduler):
    fake = FakeCrontab(["0 0 * * * /old/command # session-log", "@reboot other"])
    with patch("subprocess.run", side_effect=fake.run):
        scheduler.install()

    assert fake.lines == [
        "@reboot other",
        "0 0 * * * /usr/bin/log-sessions # session-log",
    ]


def test_remove_keeps_other_entries(scheduler):
    fake = FakeCrontab(
        ["30 6 * * * backup.sh", "0 0 * * * /usr/bin/log-sessions # session-log"]
    )
    with patch("subprocess.run", side_effect=fake.run):
        assert scheduler.is_installed()
        assert scheduler.remove() is True
        assert not scheduler.is_installed()

    assert fake.lines == ["30 6 * * * backup.sh"]


def test_remove_when_not_installed(scheduler):
    fake = FakeCrontab(missing=True)
    with patch("subprocess.run", side_effect=fake.run):
        assert scheduler.remove() is False

    assert fake.writes == 0


def test_other_schedule_names_untouched():
    fake = FakeCrontab(["0 0 * * * other # session-log-2"])
    with patch("subprocess.run", side_effect=fake.run):
        CronScheduler(command="x", name="session-log").install()

    assert fake.lines[0] == "0 0 * * * other # session-log-2"
    assert len(fake.lines) == 2


def test_crontab_failure_raises(scheduler):
    failed = subprocess.CompletedProcess(
        ["crontab", "-l"], 1, stdout="", stderr="permission denied"
    )
    with patch("subprocess.run", return_value=failed):
        with pytest.raises(RuntimeError, match="permission denied"):
            scheduler.install()


def test_default_command_runs_module(monkeypatch, tmp_path):
    """The entry changes to the install directory before running."""
    workdir = tmp_path / "game logs"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    command = default_command()

    assert command.startswith(f"cd {shlex.quote(os.getcwd())} && ")
    assert "'" in command.split(" && ")[0]
    assert command.endswith("-m ttrpg_session_logger run")
    assert CronScheduler().command == command
    assert default_command("/srv/sessions").startswith("cd /srv/sessions && ")
