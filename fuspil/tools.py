"""The fusion callers and the policy deciding which of them run.

FuSPiL knows six fusion detection tools. Each of them can be enabled
from the command line, but the policy for a run also depends on the
sequencing layout: Pizzly and SQUID only work with paired-end data. The
`debug` mode bypasses this restriction, so that a single tool can be
tested on a small single-end dataset, but it also disables the
integrated summary of the results.
"""
from enum import Enum
from logging import Logger
from typing import Dict, Iterable, List, Mapping, Optional

from .core.exceptions import ConfigError
from .core.sample import EndType


class Tool(Enum):
    """A fusion detection tool.

    The order of the members is the order used for the summary
    arguments and for the run-level tables.
    """

    STAR_FUSION = "star_fusion"
    ARRIBA = "arriba"
    ERICSCRIPT = "ericscript"
    PIZZLY = "pizzly"
    FUSIONCATCHER = "fusioncatcher"
    SQUID = "squid"

    @property
    def paired_end_only(self) -> bool:
        return self in (Tool.PIZZLY, Tool.SQUID)

    @property
    def report_option(self) -> str:
        """The option used by fusion-report for the output of the tool."""
        return "--" + self.value.replace("_", "")

    @property
    def directory_name(self) -> str:
        return self.value.replace("_", "-")

    def is_compatible(self, end_type: EndType) -> bool:
        return end_type == EndType.PAIRED or not self.paired_end_only


class EnablementPolicy:
    """Which tools run for the current execution.

    The policy is computed once, before any stage is executed, and it
    cannot be changed afterwards. A tool runs when its flag is set and it
    is compatible with the end type of the run, or when the flag is set
    and the run is in debug mode.
    """

    def __init__(self, runs: Mapping[Tool, bool], end_type: EndType, debug: bool) -> None:
        self._runs = {tool: bool(runs.get(tool, False)) for tool in Tool}
        self._end_type = end_type
        self._debug = debug

    @classmethod
    def create(
        cls,
        flags: Iterable[Tool],
        end_type: EndType,
        debug: bool = False,
        logger: Optional[Logger] = None,
    ) -> "EnablementPolicy":
        """Create the policy from the enabled tool flags.

        Raises:
            ConfigError: no tool has been flagged, or none of the
                         flagged tools can run with `end_type`.

        """
        flagged = set(flags)
        if not flagged:
            raise ConfigError(
                "no fusion tool is enabled. Enable at least one of: "
                + ", ".join("--" + tool.directory_name for tool in Tool)
            )

        runs: Dict[Tool, bool] = {}
        for tool in Tool:
            runs[tool] = tool in flagged and (tool.is_compatible(end_type) or debug)
            if tool in flagged and not runs[tool] and logger is not None:
                logger.warning(
                    "%s needs paired-end reads and it is skipped for this "
                    "single-end run",
                    tool.directory_name,
                )

        if not any(runs.values()):
            raise ConfigError(
                "none of the enabled tools (%s) can run on %s-end data. "
                "Use --debug to force their execution."
                % (
                    ", ".join(tool.directory_name for tool in Tool if tool in flagged),
                    end_type.name.lower(),
                )
            )

        return cls(runs, end_type, debug)

    def runs(self, tool: Tool) -> bool:
        return self._runs[tool]

    @property
    def enabled_tools(self) -> List[Tool]:
        return [tool for tool in Tool if self._runs[tool]]

    @property
    def end_type(self) -> EndType:
        return self._end_type

    @property
    def debug(self) -> bool:
        return self._debug

    @property
    def synthesis_enabled(self) -> bool:
        """Whether the integrated summary must be produced.

        Debug runs are meant for testing isolated tools, therefore the
        summary is never created.
        """
        return not self._debug and any(self._runs.values())

    def __repr__(self) -> str:
        return "EnablementPolicy(%s, end_type=%s, debug=%s)" % (
            ", ".join(tool.value for tool in self.enabled_tools),
            self._end_type.name,
            self._debug,
        )
