"""The module to handle Arriba.

Arriba works on the chimeric alignments written by STAR inside the main
BAM file. The BAM is kept next to the result, because it is needed by
the Arriba visualization.
"""
from typing import List

from .core.executor import quote, quote_all
from .core.stage import ToolStage
from .tools import Tool


class Arriba(ToolStage):
    tool = Tool.ARRIBA
    result_suffix = "arriba.tsv"
    bam_suffix = "arriba.bam"
    discarded_suffix = "arriba_discarded.tsv"

    @property
    def bam_filename(self) -> str:
        return self.analysis.sample_filename(self.bam_suffix)

    @property
    def artifacts(self) -> List[str]:
        return [
            self.result_filename,
            self.bam_filename,
            self.analysis.sample_filename(self.discarded_suffix),
        ]

    def align(self) -> None:
        self.analysis.logger.info("Running STAR alignment for Arriba")
        self.executor(
            f"{self.config.star} "
            f"--genomeDir {quote(self.references['star_index'])} "
            f"--readFilesIn {quote_all(self.sample.reads)} "
            f"--runThreadN {self.analysis.threads} "
            f"--genomeLoad NoSharedMemory "
            f"--outSAMtype BAM SortedByCoordinate "
            f"--outSAMunmapped Within "
            f"--outBAMcompression 0 "
            f"--outFilterMultimapNmax 1 "
            f"--outFilterMismatchNmax 3 "
            f"--chimSegmentMin 10 "
            f"--chimOutType WithinBAM SoftClip "
            f"--chimJunctionOverhangMin 10 "
            f"--chimScoreMin 1 "
            f"--chimScoreDropMax 30 "
            f"--chimScoreJunctionNonGTAG 0 "
            f"--chimScoreSeparation 1 "
            f"--alignSJstitchMismatchNmax 5 -1 5 5 "
            f"--chimSegmentReadGapMax 3 "
            f"--sjdbOverhang {self.analysis.sjdb_overhang}"
            f"{self.read_files_command}",
            error_string="STAR exited with status {status}",
            exception_string="STAR error for sample {sample} (Arriba)",
        )
        self.executor.rename("Aligned.sortedByCoord.out.bam", self.bam_filename)

    def call_fusions(self) -> None:
        self.analysis.logger.info("Running Arriba")
        self.executor(
            f"{self.config.arriba} "
            f"-x {quote(self.bam_filename)} "
            f"-a {quote(self.references['fasta'])} "
            f"-g {quote(self.references['gtf'])} "
            f"-b {quote(self.references['arriba_blacklist'])} "
            f"-o {quote(self.result_filename)} "
            f"-O {quote(self.analysis.sample_filename(self.discarded_suffix))} "
            f"-T -P",
            error_string="Arriba exited with status {status}",
            exception_string="arriba error for sample {sample}",
        )

    def execute(self) -> None:
        self.align()
        self.call_fusions()
