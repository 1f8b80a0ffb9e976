"""The optional visualization stages.

Both stages are secondary consumers of the results: FusionInspector
validates the fusions listed by the summary, and the Arriba drawing
script plots the fusions found by Arriba using its alignments. They do
not take part in the aggregation and they are skipped when their input
is not available.
"""
import os
from typing import Any, Dict, Optional

from .aggregator import JoinedRow
from .arriba import Arriba
from .config import Config
from .core.analysis import Analysis
from .core.executor import Executor, quote
from .core.result import Present
from .references import ReferenceBundle
from .summary import SummaryResult
from .tools import Tool


class FusionInspector:
    """Run FusionInspector on the fusions listed by the summary."""

    stage_name = "fusion-inspector"

    def __init__(
        self,
        root: str,
        config: Config,
        parameters: Dict[str, Any],
        references: ReferenceBundle,
    ) -> None:
        self.root = root
        self.config = config
        self.parameters = parameters
        self.references = references

    def run(self, row: JoinedRow, summary: Optional[SummaryResult]) -> Optional[str]:
        """Inspect the fusions of a sample.

        Returns:
            The output directory, or `None` if there was nothing to
            inspect.

        """
        if summary is None or not summary.has_fusions:
            return None

        analysis = Analysis(
            row.sample, self.stage_name, self.root, self.config, self.parameters
        )
        sample = row.sample
        reads_option = f"--left_fq {quote(sample.left)}"
        if sample.right is not None:
            reads_option += f" --right_fq {quote(sample.right)}"

        try:
            analysis.logger.info("Running FusionInspector")
            executor = Executor(analysis)
            executor(
                f"{self.config.fusion_inspector} "
                f"--fusions {quote(summary.fusion_list)} "
                f"--genome_lib {quote(self.references['star_fusion_ref'])} "
                f"{reads_option} "
                f"--CPU {analysis.threads} "
                f"--output_dir . "
                f"--out_prefix {quote(sample.identifier)} "
                f"--vis",
                error_string="FusionInspector exited with status {status}",
                exception_string="FusionInspector error for sample {sample}",
            )
            analysis.logger.info("Finished FusionInspector")
            return analysis.out_dir
        finally:
            analysis.close()


class ArribaVisualization:
    """Draw the fusions found by Arriba."""

    stage_name = "arriba-visualization"

    def __init__(
        self,
        root: str,
        config: Config,
        parameters: Dict[str, Any],
        references: ReferenceBundle,
    ) -> None:
        self.root = root
        self.config = config
        self.parameters = parameters
        self.references = references

    def run(self, row: JoinedRow) -> Optional[str]:
        """Draw the Arriba fusions of a sample.

        Returns:
            The PDF file, or `None` if Arriba did not find anything.

        """
        result = row[Tool.ARRIBA]
        if not isinstance(result, Present) or result.record_count() == 0:
            return None

        bam_filename = os.path.join(
            os.path.dirname(result.filename),
            "%s_%s" % (row.sample_id, Arriba.bam_suffix),
        )
        analysis = Analysis(
            row.sample, self.stage_name, self.root, self.config, self.parameters
        )
        output_filename = analysis.sample_filename("arriba.pdf")

        try:
            analysis.logger.info("Running Arriba visualization")
            executor = Executor(analysis)
            executor(
                f"{self.config.draw_fusions} "
                f"--fusions={quote(result.filename)} "
                f"--alignments={quote(bam_filename)} "
                f"--output={quote(output_filename)} "
                f"--annotation={quote(self.references['gtf'])} "
                f"--cytobands={quote(self.references['arriba_cytobands'])} "
                f"--proteinDomains={quote(self.references['arriba_protein_domains'])}",
                error_string="draw_fusions.R exited with status {status}",
                exception_string="Arriba visualization error for sample {sample}",
            )
            analysis.logger.info("Finished Arriba visualization")
            return output_filename
        finally:
            analysis.close()
