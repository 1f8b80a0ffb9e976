"""The outcome of a fusion tool for one sample.

A tool either produced a result file for a sample (`Present`) or it did
not (`Absent`). The absence is not an error: the tool was not enabled for
the run, or it ran successfully without producing any result. A tool
that crashed never produces a `ToolResult`, because the `Executor` raises
a `PipelineError` instead.
"""
from enum import Enum
from typing import TYPE_CHECKING, Optional

from . import utils

if TYPE_CHECKING:
    from ..tools import Tool


class AbsenceReason(Enum):
    DISABLED = "disabled"
    NO_OUTPUT = "no output"


class ToolResult:
    """The base class of the two possible outcomes."""

    def __init__(self, sample_id: str, tool: "Tool") -> None:
        self.sample_id = sample_id
        self.tool = tool


class Present(ToolResult):
    """A result file is available."""

    def __init__(self, sample_id: str, tool: "Tool", filename: str) -> None:
        super().__init__(sample_id, tool)
        self.filename = filename
        self._record_count: Optional[int] = None

    def record_count(self) -> int:
        """Return the number of records in the result file.

        The value is computed once and cached.
        """
        if self._record_count is None:
            self._record_count = utils.count_records(self.filename)
        return self._record_count

    def __repr__(self) -> str:
        return "Present(%r, %s, %r)" % (self.sample_id, self.tool.value, self.filename)


class Absent(ToolResult):
    """No result is available, for the specified reason."""

    def __init__(
        self,
        sample_id: str,
        tool: "Tool",
        reason: AbsenceReason = AbsenceReason.NO_OUTPUT,
    ) -> None:
        super().__init__(sample_id, tool)
        self.reason = reason

    def __repr__(self) -> str:
        return "Absent(%r, %s, %s)" % (
            self.sample_id,
            self.tool.value,
            self.reason.name,
        )
