"""
Daily schedule management via the user's crontab.

The entry runs at local midnight and is tagged with a trailing
"# <schedule name>" comment so it can be found again for reinstall or
removal without touching the user's other entries.
"""

import logging
import os
import shlex
import subprocess
import sys
from typing import List

from .config import DEFAULT_SCHEDULE_NAME

LOG = logging.getLogger(__name__)

MIDNIGHT = "0 0 * * *"


def default_command(workdir: str = "") -> str:
    """Command that runs today's session log with this interpreter.

    Cron starts jobs in $HOME, so the command first changes to workdir
    (default: the current directory) where .env and the relative
    credential and data paths live.
    """
    workdir = workdir or os.getcwd()
    return (
        f"cd {shlex.quote(workdir)} && "
        f"{shlex.quote(sys.executable)} -m ttrpg_session_logger run"
    )


class CronScheduler:
    """Installs and removes the once-daily crontab entry."""

    def __init__(
        self,
        command: str = "",
        name: str = DEFAULT_SCHEDULE_NAME,
        crontab_bin: str = "crontab",
    ):
        self.command = command or default_command()
        self.name = name
        self.crontab_bin = crontab_bin

    @property
    def marker(self) -> str:
        return f"# {self.name}"

    def entry(self) -> str:
        return f"{MIDNIGHT} {self.command} {self.marker}"

    def _is_ours(self, line: str) -> bool:
        return line.rstrip().endswith(self.marker)

    def _read(self) -> List[str]:
        proc = subprocess.run(
            [self.crontab_bin, "-l"], capture_output=True, text=True
        )
        if proc.returncode != 0:
            # crontab -l exits non-zero when the user has no crontab yet
            if "no crontab" in proc.stderr.lower():
                return []
            raise RuntimeError(f"crontab -l failed: {proc.stderr.strip()}")
        return proc.stdout.splitlines()

    def _write(self, lines: List[str]) -> None:
        content = "\n".join(lines) + "\n" if lines else ""
        proc = subprocess.run(
            [self.crontab_bin, "-"], input=content, capture_output=True, text=True
        )
        if proc.returncode != 0:
            raise RuntimeError(f"crontab install failed: {proc.stderr.strip()}")

    def is_installed(self) -> bool:
        return any(self._is_ours(line) for line in self._read())

    def install(self) -> str:
        """Install the daily entry, replacing any previous one with this name.

        Returns:
            The crontab line that was installed
        """
        lines = self._read()
        kept = [line for line in lines if not self._is_ours(line)]
        if len(kept) != len(lines):
            LOG.info("Replacing existing schedule '%s'", self.name)

        entry = self.entry()
        kept.append(entry)
        self._write(kept)
        LOG.info("Installed daily schedule '%s': %s", self.name, entry)
        return entry

    def remove(self) -> bool:
        """Remove the daily entry.

        Returns:
            True if an entry was removed, False if none was installed
        """
        lines = self._read()
        kept = [line for line in lines if not self._is_ours(line)]
        if len(kept) == len(lines):
            LOG.info("No schedule named '%s' is installed", self.name)
            return False

        self._write(kept)
        LOG.info("Removed daily schedule '%s'", self.name)
        return True
