"""The generic contract of a fusion tool stage.

A stage takes one sample, its own reference files and the number of
threads, runs one or more external commands and produces at most one
result file. The observable outcome is a `ToolResult`: `Present` if the
result file exists once all the commands succeeded, `Absent` otherwise.
A failing command raises a `PipelineError`, which is fatal for the run.
"""
import os
from typing import TYPE_CHECKING, Any, Dict, List

from ..config import Config
from .analysis import Analysis
from .executor import Executor
from .result import Absent, AbsenceReason, Present, ToolResult
from .sample import Sample

if TYPE_CHECKING:
    from ..references import ReferenceBundle
    from ..tools import Tool


class ToolStage:
    """The base class of the fusion tool stages.

    Subclasses must define `tool`, `result_suffix` and `execute`.
    """

    tool: "Tool"
    result_suffix: str

    def __init__(
        self,
        sample: Sample,
        references: "ReferenceBundle",
        root: str,
        config: Config,
        parameters: Dict[str, Any],
    ) -> None:
        self.sample = sample
        self.references = references
        self.analysis = Analysis(
            sample, self.tool.directory_name, root, config, parameters
        )
        self.config = config
        self.executor = Executor(self.analysis)

    @property
    def result_filename(self) -> str:
        """The sample-scoped name of the final result file."""
        return self.analysis.sample_filename(self.result_suffix)

    @property
    def read_files_command(self) -> str:
        """The STAR option to read compressed FASTQ files, if needed."""
        if all(read.lower().endswith(".gz") for read in self.sample.reads):
            return " --readFilesCommand zcat"
        return ""

    @property
    def artifacts(self) -> List[str]:
        """The files of a previous run that must not survive a rerun."""
        return [self.result_filename]

    def execute(self) -> None:
        raise NotImplementedError

    def run(self) -> ToolResult:
        """Run the stage and return its outcome.

        The artifacts of a previous run in the same directory are removed
        first, so that only the files of this run are reported.
        """
        try:
            return self._run()
        finally:
            self.analysis.close()

    def _run(self) -> ToolResult:
        logger = self.analysis.logger
        logger.info("Running %s", self.tool.directory_name)
        for artifact in self.artifacts:
            self.executor.remove(artifact)
        self.execute()

        if not self.analysis.run_fake and os.path.isfile(self.result_filename):
            logger.info("Finished %s", self.tool.directory_name)
            return Present(self.sample.identifier, self.tool, self.result_filename)
        else:
            logger.info(
                "Finished %s, no result produced for sample %s",
                self.tool.directory_name,
                self.sample.identifier,
            )
            return Absent(self.sample.identifier, self.tool, AbsenceReason.NO_OUTPUT)
