"""The join of the tool results for each sample.

The fusion tools run independently, and they finish their work at
different times for different samples. The `FanInAggregator` collects
all the results and releases a `JoinedRow` for a sample as soon as every
enabled tool reported something for it, either a result file or its
absence.

The join is exhaustive: every sample of the run produces exactly one
row, even when no tool found anything, and a tool that stops reporting
before covering all the samples is an error. Partial rows are kept only
until they are complete.
"""
import threading
from collections import deque
from typing import Deque, Dict, Iterable, Iterator, List, Optional, Set

from .core.exceptions import AggregationError
from .core.result import Absent, AbsenceReason, Present, ToolResult
from .core.sample import Sample
from .tools import EnablementPolicy, Tool


class JoinedRow:
    """The results of all the tools for one sample.

    There is one slot for each known tool. The slots of the tools that
    are not enabled for the run are always `Absent` with
    `AbsenceReason.DISABLED`.
    """

    def __init__(self, sample: Sample, slots: Dict[Tool, ToolResult]) -> None:
        missing = [tool.value for tool in Tool if tool not in slots]
        if missing:
            raise AggregationError(
                "row for sample %s is missing slots: %s"
                % (sample.identifier, ", ".join(missing))
            )

        self.sample = sample
        self.slots = dict(slots)

    @property
    def sample_id(self) -> str:
        return self.sample.identifier

    def __getitem__(self, tool: Tool) -> ToolResult:
        return self.slots[tool]

    def present(self) -> List[Present]:
        """Return the available results, in tool order."""
        return [
            result
            for result in (self.slots[tool] for tool in Tool)
            if isinstance(result, Present)
        ]

    def contributing(self) -> List[Present]:
        """Return the results with at least one record, in tool order."""
        return [result for result in self.present() if result.record_count() > 0]

    def __repr__(self) -> str:
        return "JoinedRow(%s, %s)" % (
            self.sample_id,
            ", ".join(repr(self.slots[tool]) for tool in Tool),
        )


class _PartialRow:
    def __init__(self, sample: Sample, policy: EnablementPolicy) -> None:
        self.sample = sample
        self.slots: Dict[Tool, ToolResult] = {
            tool: Absent(sample.identifier, tool, AbsenceReason.DISABLED)
            for tool in Tool
            if not policy.runs(tool)
        }
        self.pending: Set[Tool] = set(policy.enabled_tools)


class FanInAggregator:
    """A keyed join barrier between the tool stages and the summary.

    Results can be submitted from any thread, in any order. The rows are
    consumed with `rows`, which blocks until new rows are available.
    """

    def __init__(self, samples: Iterable[Sample], policy: EnablementPolicy) -> None:
        self.policy = policy
        self._condition = threading.Condition()
        self._samples: Dict[str, Sample] = {}
        for sample in samples:
            if sample.identifier in self._samples:
                raise AggregationError(
                    "sample %s is present more than once" % sample.identifier
                )
            self._samples[sample.identifier] = sample

        self._partial: Dict[str, _PartialRow] = {}
        self._ready: Deque[JoinedRow] = deque()
        self._released: Set[str] = set()
        self._open_channels: Set[Tool] = set(policy.enabled_tools)
        self._error: Optional[BaseException] = None

        # rows without enabled tools are complete from the start
        if not self._open_channels:
            for sample in self._samples.values():
                self._release(_PartialRow(sample, policy))

    def _release(self, partial: _PartialRow) -> None:
        self._ready.append(JoinedRow(partial.sample, partial.slots))
        self._released.add(partial.sample.identifier)
        self._partial.pop(partial.sample.identifier, None)

    def _fail(self, error: BaseException) -> None:
        if self._error is None:
            self._error = error
        self._condition.notify_all()

    def submit(self, result: ToolResult) -> None:
        """Store the result of a tool for a sample.

        Raises:
            AggregationError: the result refers to an unknown sample or a
                              tool that is not enabled, or the tool
                              already reported for the sample.

        """
        with self._condition:
            try:
                self._submit(result)
            except AggregationError as error:
                self._fail(error)
                raise

            self._condition.notify_all()

    def _submit(self, result: ToolResult) -> None:
        sample_id = result.sample_id
        if sample_id not in self._samples:
            raise AggregationError(
                "%s reported a result for the unknown sample %s"
                % (result.tool.value, sample_id)
            )

        if not self.policy.runs(result.tool):
            raise AggregationError(
                "%s is not enabled, but it reported a result for sample %s"
                % (result.tool.value, sample_id)
            )

        if result.tool not in self._open_channels:
            raise AggregationError(
                "%s reported a result for sample %s after its channel was closed"
                % (result.tool.value, sample_id)
            )

        if sample_id in self._released:
            raise AggregationError(
                "%s reported a second result for sample %s"
                % (result.tool.value, sample_id)
            )

        partial = self._partial.get(sample_id)
        if partial is None:
            partial = _PartialRow(self._samples[sample_id], self.policy)
            self._partial[sample_id] = partial

        if result.tool not in partial.pending:
            raise AggregationError(
                "%s reported a second result for sample %s"
                % (result.tool.value, sample_id)
            )

        partial.slots[result.tool] = result
        partial.pending.remove(result.tool)
        if not partial.pending:
            self._release(partial)

    def close(self, tool: Tool) -> None:
        """Declare that `tool` will not report anything else.

        Raises:
            AggregationError: some samples did not receive a result from
                              `tool`.

        """
        with self._condition:
            if tool not in self._open_channels:
                return
            self._open_channels.remove(tool)

            missing = sorted(
                sample_id
                for sample_id in self._samples
                if sample_id not in self._released
                and (
                    sample_id not in self._partial
                    or tool in self._partial[sample_id].pending
                )
            )
            if missing:
                error = AggregationError(
                    "%s terminated without reporting for samples: %s"
                    % (tool.value, ", ".join(missing))
                )
                self._fail(error)
                raise error

            self._condition.notify_all()

    def abort(self, error: BaseException) -> None:
        """Stop the aggregation because a stage failed."""
        with self._condition:
            self._fail(error)

    @property
    def pending_samples(self) -> List[str]:
        """Return the samples with a partially filled row."""
        with self._condition:
            return sorted(self._partial)

    def rows(self) -> Iterator[JoinedRow]:
        """Yield each row once, as soon as it is complete.

        The generator ends when every tool channel has been closed and
        all the rows have been consumed.

        Raises:
            AggregationError: a sample never received all its results.
            The error passed to `abort`, if any.

        """
        while True:
            with self._condition:
                while not self._ready and self._open_channels and self._error is None:
                    self._condition.wait()

                if self._error is not None:
                    raise self._error

                if self._ready:
                    row = self._ready.popleft()
                else:
                    never_released = sorted(
                        sample_id
                        for sample_id in self._samples
                        if sample_id not in self._released
                    )
                    if never_released:
                        raise AggregationError(
                            "no complete result for samples: %s"
                            % ", ".join(never_released)
                        )
                    return

            yield row
