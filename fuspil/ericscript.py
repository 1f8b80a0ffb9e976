"""The module to handle EricScript."""
import os
import shutil

from .core.analysis import Analysis
from .core.executor import quote, quote_all
from .core.stage import ToolStage
from .tools import Tool


def remove_previous_output(analysis: Analysis, output_dir: str) -> None:
    """Remove the output of a previous execution.

    EricScript refuses to start when its output directory exists.
    """
    if os.path.exists(output_dir):
        analysis.logger.info("Removing previous EricScript output %s", output_dir)
        shutil.rmtree(output_dir)


class EricScript(ToolStage):
    """Helper class to run EricScript.

    EricScript writes everything inside a temporary directory, and only
    the filtered list of the candidate fusions is kept as result.
    """

    tool = Tool.ERICSCRIPT
    result_suffix = "ericscript.tsv"

    def execute(self) -> None:
        output_dir = self.analysis.output_path("tmp")
        self.executor(remove_previous_output, output_dir=output_dir)

        self.executor(
            f"{self.config.ericscript} "
            f"-db {quote(self.references['ericscript_ref'])} "
            f"-name fusions "
            f"-p {self.analysis.threads} "
            f"-o {quote(output_dir)} "
            f"{quote_all(self.sample.reads)}",
            error_string="EricScript exited with status {status}",
            exception_string="ericscript error for sample {sample}",
        )

        self.executor.rename(
            os.path.join(output_dir, "fusions.results.filtered.tsv"),
            self.result_filename,
        )
