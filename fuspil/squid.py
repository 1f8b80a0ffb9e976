"""Module to handle SQUID software."""
from typing import List

from .core.executor import quote, quote_all
from .core.stage import ToolStage
from .tools import Tool


class Squid(ToolStage):
    """Class to help the multi-step process of running SQUID.

    SQUID builds a genome segment graph from the concordant and the
    chimeric alignments, therefore STAR must write the chimeric reads in
    a separated SAM file. The raw structural variants found by SQUID are
    then annotated with the genes from the GTF, and the annotated table
    is the result of the stage. SQUID needs paired-end reads.
    """

    tool = Tool.SQUID
    result_suffix = "fusions_annotated.txt"

    @property
    def chimeric_bam(self) -> str:
        return self.analysis.sample_filename("chimeric.bam")

    @property
    def fusions_prefix(self) -> str:
        return "%s_fusions" % self.sample.identifier

    @property
    def artifacts(self) -> List[str]:
        return [
            self.result_filename,
            self.chimeric_bam,
            self.analysis.output_path(self.fusions_prefix + "_sv.txt"),
        ]

    def align(self) -> None:
        self.analysis.logger.info("Running STAR alignment for SQUID")
        self.executor(
            f"{self.config.star} "
            f"--genomeDir {quote(self.references['star_index'])} "
            f"--sjdbGTFfile {quote(self.references['gtf'])} "
            f"--runThreadN {self.analysis.threads} "
            f"--readFilesIn {quote_all(self.sample.reads)} "
            f"--twopassMode Basic "
            f"--chimOutType SeparateSAMold "
            f"--chimSegmentMin 20 "
            f"--chimJunctionOverhangMin 12 "
            f"--alignSJDBoverhangMin 10 "
            f"--outReadsUnmapped Fastx "
            f"--outSAMstrandField intronMotif "
            f"--outSAMtype BAM SortedByCoordinate "
            f"--sjdbOverhang {self.analysis.sjdb_overhang}"
            f"{self.read_files_command}",
            error_string="STAR exited with status {status}",
            exception_string="STAR error for sample {sample} (SQUID)",
        )

        self.executor(
            f"{self.config.samtools} view -Shb Chimeric.out.sam "
            f"> {quote(self.chimeric_bam)}",
            error_string="samtools view exited with status {status}",
            exception_string="samtools error for sample {sample} (SQUID)",
        )

    def call_fusions(self) -> None:
        self.analysis.logger.info("Running SQUID")
        self.executor(
            f"{self.config.squid} "
            f"-b Aligned.sortedByCoord.out.bam "
            f"-c {quote(self.chimeric_bam)} "
            f"-o {quote(self.fusions_prefix)}",
            error_string="SQUID exited with status {status}",
            exception_string="squid error for sample {sample}",
        )

    def annotate(self) -> None:
        self.analysis.logger.info("Annotating SQUID output")
        self.executor(
            f"{self.config.annotate_squid} "
            f"{quote(self.references['gtf'])} "
            f"{quote(self.fusions_prefix + '_sv.txt')} "
            f"{quote(self.result_filename)}",
            error_string="AnnotateSQUIDOutput exited with status {status}",
            exception_string="SQUID annotation error for sample {sample}",
        )

    def execute(self) -> None:
        self.align()
        self.call_fusions()
        self.annotate()
