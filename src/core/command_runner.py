#!/usr/bin/env -S python3 -B -u
"""
External command runner.

All exporters reach the system tools through this class, which resolves
executables against an explicit search path instead of relying on the
ambient PATH. Tests substitute a fake with the same two methods.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .structured_logging import get_logger


@dataclass(frozen=True)
class CommandResult:
    """Captured result of one external command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> List[str]:
        """Return stdout split into lines, without trailing newlines."""
        return self.stdout.splitlines()


class CommandRunner:
    """Runs external tools found in a configured search path."""

    def __init__(self, search_path: Optional[Sequence[str]] = None, verbose: int = 0):
        if search_path is None:
            search_path = [d for d in os.environ.get('PATH', os.defpath).split(os.pathsep) if d]
        self.search_path = list(search_path)
        self.verbose = verbose
        self.logger = get_logger(__name__)

    @property
    def path_string(self) -> str:
        return os.pathsep.join(self.search_path)

    def which(self, tool: str) -> Optional[str]:
        """Return the full path of tool, or None when it cannot be located."""
        return shutil.which(tool, path=self.path_string)

    def exists(self, tool: str) -> bool:
        """Check if a tool is locatable in the search path."""
        found = self.which(tool) is not None
        if not found:
            self.logger.debug(f"Tool not found: {tool}", search_path=self.path_string)
        return found

    def run(self, args: Sequence[str]) -> CommandResult:
        """
        Execute a command and capture its output.

        A non-zero exit status is returned, not raised; callers decide
        whether a failure skips an object or is reported.

        Args:
            args: Command and arguments; the command is resolved in the search path

        Returns:
            CommandResult with return code, stdout and stderr
        """
        args = list(args)
        executable = self.which(args[0]) or args[0]

        env = dict(os.environ)
        env['PATH'] = self.path_string

        try:
            completed = subprocess.run(
                [executable] + args[1:],
                capture_output=True,
                text=True,
                env=env,
                check=False
            )
            result = CommandResult(completed.returncode, completed.stdout, completed.stderr)
        except OSError as e:
            # Same status a shell reports for a command it cannot execute
            result = CommandResult(127, "", str(e))

        self.logger.log_command_execution(args, success=result.ok, exit_code=result.returncode)
        if not result.ok and result.stderr:
            self.logger.debug(f"Stderr: {result.stderr.strip()}")
        self.logger.trace(f"Output of {args[0]}", lines=len(result.lines()))
        return result
