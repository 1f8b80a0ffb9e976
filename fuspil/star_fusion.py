"""The module to handle STAR-Fusion."""
import os

from .core.executor import quote, quote_all
from .core.stage import ToolStage
from .tools import Tool


class StarFusion(ToolStage):
    """Helper class to run STAR-Fusion on the reads of a sample.

    The chimeric junctions are obtained with a two-pass alignment with
    STAR, using the index that is shipped with the CTAT genome lib, then
    STAR-Fusion is run on the junctions.
    """

    tool = Tool.STAR_FUSION
    result_suffix = "star-fusion.tsv"

    def align(self) -> None:
        self.analysis.logger.info("Running STAR chimeric alignment")
        config = self.config
        genome_lib = self.references["star_fusion_ref"]

        self.executor(
            f"{config.star} "
            f"--genomeDir {quote(os.path.join(genome_lib, 'ref_genome.fa.star.idx'))} "
            f"--readFilesIn {quote_all(self.sample.reads)} "
            f"--twopassMode Basic "
            f"--outReadsUnmapped None "
            f"--chimSegmentMin 12 "
            f"--chimJunctionOverhangMin 12 "
            f"--alignSJDBoverhangMin 10 "
            f"--alignMatesGapMax 100000 "
            f"--alignIntronMax 100000 "
            f"--chimSegmentReadGapMax 3 "
            f"--alignSJstitchMismatchNmax 5 -1 5 5 "
            f"--runThreadN {self.analysis.threads} "
            f"--outSAMstrandField intronMotif "
            f"--outSAMunmapped Within "
            f"--outSAMattrRGline ID:GRPundef "
            f"--chimMultimapScoreRange 10 "
            f"--chimMultimapNmax 10 "
            f"--chimNonchimScoreDropMin 10 "
            f"--peOverlapNbasesMin 12 "
            f"--peOverlapMMp 0.1 "
            f"--sjdbOverhang {self.analysis.sjdb_overhang} "
            f"--chimOutJunctionFormat 1"
            f"{self.read_files_command}",
            error_string="STAR exited with status {status}",
            exception_string="STAR error for sample {sample} (STAR-Fusion)",
        )

    def call_fusions(self) -> None:
        self.analysis.logger.info("Running STAR-Fusion")
        reads_option = f"--left_fq {quote(self.sample.left)}"
        if self.sample.right is not None:
            reads_option += f" --right_fq {quote(self.sample.right)}"

        self.executor(
            f"{self.config.star_fusion} "
            f"--genome_lib_dir {quote(self.references['star_fusion_ref'])} "
            f"-J Chimeric.out.junction "
            f"{reads_option} "
            f"--CPU {self.analysis.threads} "
            f"--examine_coding_effect "
            f"--output_dir .",
            error_string="STAR-Fusion exited with status {status}",
            exception_string="STAR-Fusion error for sample {sample}",
        )

        self.executor.rename(
            "star-fusion.fusion_predictions.tsv", self.result_filename
        )

    def execute(self) -> None:
        self.align()
        self.call_fusions()
