#!/usr/bin/env -S python3 -B -u
"""
Base class for the state exporters.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional, Sequence

from ..core.command_runner import CommandRunner
from ..core.config_loader import DEFAULT_TOOLS
from ..core.exceptions import ToolNotFoundError
from ..core.models import ParseStats
from ..core.structured_logging import get_logger


class BaseExporter(ABC):
    """
    Base class for all exporters.

    An exporter turns live state into lines of a shell script. Lines are
    yielded one at a time so callers can stream them to stdout.
    """

    # Configuration keys of the tools that must be present
    required_tools: List[str] = []

    def __init__(self, runner: CommandRunner, tools: Optional[Dict[str, str]] = None, verbose: int = 0):
        self.runner = runner
        self.tools = dict(DEFAULT_TOOLS)
        if tools:
            self.tools.update(tools)
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__module__)
        self.stats = ParseStats()

    def tool(self, key: str) -> str:
        """Executable configured for a tool key."""
        return self.tools[key]

    def check_prerequisites(self) -> None:
        """Raise ToolNotFoundError for the first required tool that is missing."""
        for key in self.required_tools:
            tool = self.tool(key)
            if not self.runner.exists(tool):
                raise ToolNotFoundError(tool, self.runner.path_string)

    def export(self, names: Sequence[str]) -> Iterator[str]:
        """
        Yield script lines that restore the state of the named objects.

        Prerequisites are checked before the first line is produced, so a
        missing tool never leaves a partial script behind.
        """
        self.check_prerequisites()
        for name in names:
            with self.logger.timer(f"export of {name}"):
                yield from self.export_one(name)
        yield from self.export_trailer()
        self.logger.debug(
            f"{self.__class__.__name__} finished",
            parsed=self.stats.parsed,
            skipped=self.stats.skipped
        )

    @abstractmethod
    def export_one(self, name: str) -> Iterator[str]:
        """Yield the script lines for one device, bridge or datapath."""
        pass

    def export_trailer(self) -> Iterator[str]:
        """Yield lines emitted once after all objects. Nothing by default."""
        return iter(())
