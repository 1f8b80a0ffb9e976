"""The module to handle Kallisto and Pizzly."""
from typing import List

from .core.executor import quote
from .core.stage import ToolStage
from .tools import Tool


class Pizzly(ToolStage):
    """Helper class to run Pizzly on the reads of a sample.

    Pizzly is transcript based: Kallisto is run in fusion mode against
    the transcriptome, then Pizzly filters and annotates the candidates.
    The JSON output of Pizzly is flattened into a table, which is the
    result of the stage. Pizzly needs paired-end reads.
    """

    tool = Tool.PIZZLY
    result_suffix = "pizzly.txt"

    @property
    def prefix(self) -> str:
        return "%s_pizzly" % self.sample.identifier

    @property
    def artifacts(self) -> List[str]:
        return [self.result_filename, self.analysis.output_path(self.prefix + ".json")]

    def quantify(self) -> None:
        self.analysis.logger.info("Running Kallisto")
        if self.sample.right is not None:
            reads = f"{quote(self.sample.left)} {quote(self.sample.right)}"
        else:
            # debug runs only
            reads = f"--single -l 200 -s 20 {quote(self.sample.left)}"

        self.executor(
            f"{self.config.kallisto} quant "
            f"-t {self.analysis.threads} "
            f"-i {quote(self.references['pizzly_index'])} "
            f"--fusion "
            f"-o output "
            f"{reads}",
            error_string="Kallisto exited with status {status}",
            exception_string="kallisto error for sample {sample}",
        )

    def call_fusions(self) -> None:
        self.analysis.logger.info("Running Pizzly")
        prefix = self.prefix
        self.executor(
            f"{self.config.pizzly} "
            f"-k {self.analysis.parameters.get('pizzly_k', self.config.pizzly_k)} "
            f"--gtf {quote(self.references['gtf'])} "
            f"--cache output/index.cache.txt "
            f"--align-score 2 "
            f"--insert-size 400 "
            f"--fasta {quote(self.references['transcript'])} "
            f"--output {quote(prefix)} "
            f"output/fusion.txt",
            error_string="Pizzly exited with status {status}",
            exception_string="pizzly error for sample {sample}",
        )

        self.executor(
            f"{self.config.pizzly_flatten_json} {quote(prefix + '.json')} "
            f"> {quote(self.result_filename)}",
            error_string="pizzly_flatten_json exited with status {status}",
            exception_string="pizzly_flatten_json error for sample {sample}",
        )

    def execute(self) -> None:
        self.quantify()
        self.call_fusions()
