"""Module to ease the process of running a whole analysis.

Every enabled fusion tool is run for every sample as an independent unit
of work inside a pool of processes. The results flow into the
`FanInAggregator`, and each sample is summarised, visualised and stored
as soon as all its tools reported.
"""
import functools
import os
import threading
from concurrent.futures import Future, ProcessPoolExecutor
from concurrent.futures.process import BrokenProcessPool
from typing import Any, Dict, List, Mapping, Optional, Type

from .aggregator import FanInAggregator, JoinedRow
from .arriba import Arriba
from .config import Config
from .core import utils
from .core.exceptions import AggregationError, PipelineError
from .core.result import ToolResult
from .core.sample import Sample
from .core.stage import ToolStage
from .db import Db
from .ericscript import EricScript
from .fusioncatcher import FusionCatcher
from .pizzly import Pizzly
from .references import Auxiliary, Consumer, ReferenceBundle
from .squid import Squid
from .star_fusion import StarFusion
from .summary import SummarySynthesizer
from .tools import EnablementPolicy, Tool
from .visualization import ArribaVisualization, FusionInspector

STAGES: Dict[Tool, Type[ToolStage]] = {
    Tool.STAR_FUSION: StarFusion,
    Tool.ARRIBA: Arriba,
    Tool.ERICSCRIPT: EricScript,
    Tool.PIZZLY: Pizzly,
    Tool.FUSIONCATCHER: FusionCatcher,
    Tool.SQUID: Squid,
}


class StageTask:
    """A unit of work: one tool for one sample.

    Instances are sent to the worker processes, therefore they only
    contain picklable data.
    """

    def __init__(
        self,
        root: str,
        config: Config,
        parameters: Dict[str, Any],
        references: Mapping[Consumer, ReferenceBundle],
    ) -> None:
        self.root = root
        self.config = config
        self.parameters = parameters
        self.references = dict(references)

    def __call__(self, sample: Sample, tool: Tool) -> ToolResult:
        stage = STAGES[tool](
            sample, self.references[tool], self.root, self.config, self.parameters
        )
        return stage.run()


class Runner:
    """The class to ease the process of running an analysis.

    An instance of the class can be run on a list of samples. The tools
    allowed by the `EnablementPolicy` are run for every sample, then the
    summary and the optional visualizations are produced for each sample.
    """

    task_class: Type[StageTask] = StageTask

    def __init__(
        self,
        root: str,
        config: Config,
        parameters: Dict[str, Any],
        policy: EnablementPolicy,
        references: Mapping[Consumer, ReferenceBundle],
    ) -> None:
        """Create an instance of the class.

        Args:
            root: the root directory for the analysis.
            config: the configuration of the analysis.
            parameters: the parameters obtained from command line.
            policy: the tools that must be run.
            references: the resolved reference bundles.
        """
        self.root = root
        self.config = config
        self.parameters = parameters
        self.policy = policy
        self.references = dict(references)
        self.current = utils.get_overridable_current_date(parameters)
        self.logger = utils.create_file_logger(
            "fuspil.run.%s" % self.current,
            os.path.join(root, "logs", "run.%s.txt" % self.current),
        )

        self.synthesizer = SummarySynthesizer(
            root,
            config,
            parameters,
            self.references.get(Auxiliary.SUMMARY),
            policy,
        )

        self.fusion_inspector: Optional[FusionInspector] = None
        if Auxiliary.FUSION_INSPECTOR in self.references:
            self.fusion_inspector = FusionInspector(
                root, config, parameters, self.references[Auxiliary.FUSION_INSPECTOR]
            )

        self.arriba_visualization: Optional[ArribaVisualization] = None
        if Auxiliary.ARRIBA_VISUALIZATION in self.references:
            self.arriba_visualization = ArribaVisualization(
                root,
                config,
                parameters,
                self.references[Auxiliary.ARRIBA_VISUALIZATION],
            )

        self.db = Db(config)

    @property
    def workers(self) -> int:
        return max(int(self.parameters.get("workers") or self.config.workers), 1)

    def run(self, samples: List[Sample]) -> List[JoinedRow]:
        """Run the analysis for the samples.

        Returns:
            The joined results, one for each sample, in the order in
            which they have been completed.

        Raises:
            PipelineError: a stage failed.
            AggregationError: the results of the tools are inconsistent.

        """
        tools = self.policy.enabled_tools
        self.logger.info(
            "Running %s on %d samples (%s-end%s)",
            ", ".join(tool.directory_name for tool in tools),
            len(samples),
            self.policy.end_type.name.lower(),
            ", debug" if self.policy.debug else "",
        )

        aggregator = FanInAggregator(samples, self.policy)
        remaining = {tool: len(samples) for tool in tools}
        remaining_lock = threading.Lock()

        def on_result(result: ToolResult) -> None:
            self.logger.info("%s reported %r", result.tool.directory_name, result)
            try:
                aggregator.submit(result)
                with remaining_lock:
                    remaining[result.tool] -= 1
                    channel_done = remaining[result.tool] == 0
                if channel_done:
                    aggregator.close(result.tool)
            except AggregationError as error:
                # the aggregator stores the error and raises it in rows()
                self.logger.error("Aggregation error: %s", error)

        def on_error(error: BaseException) -> None:
            self.logger.error(
                "Stage failed: %s. Samples left waiting: %s",
                error,
                ", ".join(aggregator.pending_samples) or "none",
            )
            aggregator.abort(error)

        def on_done(sample: Sample, tool: Tool, future: "Future[ToolResult]") -> None:
            if future.cancelled():
                return

            error = future.exception()
            if isinstance(error, BrokenProcessPool):
                on_error(
                    PipelineError(
                        "a worker process terminated abruptly running %s for "
                        "sample %s" % (tool.directory_name, sample.identifier)
                    )
                )
            elif error is not None:
                on_error(error)
            else:
                on_result(future.result())

        if not samples:
            for tool in tools:
                aggregator.close(tool)

        task = self.task_class(self.root, self.config, self.parameters, self.references)
        rows: List[JoinedRow] = []
        executor = ProcessPoolExecutor(max_workers=self.workers)
        try:
            for sample in samples:
                for tool in tools:
                    future = executor.submit(task, sample, tool)
                    future.add_done_callback(functools.partial(on_done, sample, tool))

            for row in aggregator.rows():
                self._process_row(row)
                rows.append(row)
        except BrokenProcessPool as error:
            executor.shutdown(wait=False, cancel_futures=True)
            raise PipelineError("a worker process terminated abruptly") from error
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        else:
            executor.shutdown()

        summary_filename = self.synthesizer.write_run_summary(rows)
        self.logger.info("Run summary written to %s", summary_filename)
        return rows

    def _process_row(self, row: JoinedRow) -> None:
        contributing = row.contributing()
        if contributing:
            self.logger.info(
                "Sample %s: fusions found by %s",
                row.sample_id,
                ", ".join(result.tool.directory_name for result in contributing),
            )
        else:
            self.logger.info("Sample %s: no fusions found", row.sample_id)

        summary = self.synthesizer.run(row)

        if self.fusion_inspector is not None:
            self.fusion_inspector.run(row, summary)

        if self.arriba_visualization is not None:
            self.arriba_visualization.run(row)

        self.db.store_fusions(row, summary, self.current)
