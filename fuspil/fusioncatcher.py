"""The module to handle FusionCatcher."""
from .core.executor import quote, quote_all
from .core.sample import EndType
from .core.stage import ToolStage
from .tools import Tool


class FusionCatcher(ToolStage):
    tool = Tool.FUSIONCATCHER
    result_suffix = "fusioncatcher.txt"

    def execute(self) -> None:
        single_end = ""
        if self.sample.end_type == EndType.SINGLE:
            single_end = " --single-end"

        self.executor(
            f"{self.config.fusioncatcher} "
            f"-d {quote(self.references['fusioncatcher_ref'])} "
            f"-i {quote_all(self.sample.reads, ',')} "
            f"--threads {self.analysis.threads} "
            f"--limitSjdbInsertNsj 2000000 "
            f"-o . "
            f"--skip-blat"
            f"{single_end}",
            error_string="FusionCatcher exited with status {status}",
            exception_string="fusioncatcher error for sample {sample}",
        )

        self.executor.rename(
            "final-list_candidate-fusion-genes.txt", self.result_filename
        )
