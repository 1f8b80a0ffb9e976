"""The integrated summary of the fusions found for each sample.

The results of all the tools for a sample are merged by fusion-report,
which produces the list of the fusions found by at least one tool and a
JSON summary. Only the tools that produced at least one record are
passed to fusion-report.
"""
import os
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .aggregator import JoinedRow
from .config import Config
from .core import utils
from .core.analysis import Analysis
from .core.exceptions import PipelineError
from .core.executor import Executor, quote
from .core.result import Present
from .references import ReferenceBundle
from .tools import EnablementPolicy, Tool


class SummaryResult:
    """The files produced by the summary for a sample.

    When no tool contributed any fusion, `fusion_list` and
    `fusion_summary` are `None`.
    """

    def __init__(
        self,
        sample_id: str,
        tools: List[Tool],
        fusion_list: Optional[str] = None,
        fusion_summary: Optional[str] = None,
    ) -> None:
        self.sample_id = sample_id
        self.tools = tools
        self.fusion_list = fusion_list
        self.fusion_summary = fusion_summary

    @property
    def has_fusions(self) -> bool:
        return self.fusion_list is not None

    def __repr__(self) -> str:
        return "SummaryResult(%r, %r, %r)" % (
            self.sample_id,
            [tool.value for tool in self.tools],
            self.fusion_list,
        )


class SummarySynthesizer:
    """Run fusion-report on a `JoinedRow`."""

    stage_name = "fusion-report"
    fusion_list_name = "fusion_list.tsv"
    fusion_summary_name = "fusion_genes_mqc.json"

    def __init__(
        self,
        root: str,
        config: Config,
        parameters: Dict[str, Any],
        references: Optional[ReferenceBundle],
        policy: EnablementPolicy,
    ) -> None:
        self.root = root
        self.config = config
        self.parameters = parameters
        self.references = references
        self.policy = policy

    def should_run(self) -> bool:
        return self.policy.synthesis_enabled

    @staticmethod
    def tool_arguments(row: JoinedRow) -> List[Tuple[str, str]]:
        """Return the fusion-report options for the tools with results.

        Results that are present but empty are excluded.
        """
        return [
            (result.tool.report_option, result.filename)
            for result in row.contributing()
        ]

    @staticmethod
    def output_filenames(out_dir: str, sample_id: str) -> Tuple[str, str]:
        """Return the sample-scoped names of the fusion list and summary."""
        return (
            os.path.join(
                out_dir, "%s_%s" % (sample_id, SummarySynthesizer.fusion_list_name)
            ),
            os.path.join(
                out_dir, "%s_%s" % (sample_id, SummarySynthesizer.fusion_summary_name)
            ),
        )

    def run(self, row: JoinedRow) -> Optional[SummaryResult]:
        """Create the summary for a sample.

        Returns:
            `None` if the summary is disabled for the run, otherwise the
            produced files.

        Raises:
            PipelineError: fusion-report failed or it did not produce the
                           expected files.

        """
        if not self.should_run():
            return None

        analysis = Analysis(
            row.sample, self.stage_name, self.root, self.config, self.parameters
        )
        try:
            return self._summarize(analysis, row)
        finally:
            analysis.close()

    def _summarize(self, analysis: Analysis, row: JoinedRow) -> SummaryResult:
        assert self.references is not None

        executor = Executor(analysis)
        fusion_list, fusion_summary = self.output_filenames(
            analysis.out_dir, row.sample_id
        )
        # outputs of a previous run must not survive a run without fusions
        for filename in (
            self.fusion_list_name,
            self.fusion_summary_name,
            fusion_list,
            fusion_summary,
        ):
            executor.remove(filename)

        contributing = row.contributing()
        tools = [result.tool for result in contributing]
        if not contributing:
            analysis.logger.info(
                "No fusions found for sample %s, summary skipped", row.sample_id
            )
            return SummaryResult(row.sample_id, tools)

        arguments = " ".join(
            "%s %s" % (option, quote(filename))
            for option, filename in self.tool_arguments(row)
        )

        analysis.logger.info(
            "Running fusion-report with %s", ", ".join(tool.value for tool in tools)
        )
        executor(
            f"{self.config.fusion_report} run "
            f"{quote(row.sample_id)} "
            f"{quote(analysis.out_dir)} "
            f"{quote(self.references['fusion_report_db'])} "
            f"{arguments}",
            error_string="fusion-report exited with status {status}",
            exception_string="fusion-report error for sample {sample}",
        )

        for source, destination in (
            (self.fusion_list_name, fusion_list),
            (self.fusion_summary_name, fusion_summary),
        ):
            if not executor.rename(source, destination) and not analysis.run_fake:
                raise PipelineError(
                    "fusion-report did not create %s for sample %s"
                    % (source, row.sample_id)
                )

        analysis.logger.info("Finished fusion-report")
        return SummaryResult(row.sample_id, tools, fusion_list, fusion_summary)

    def write_run_summary(self, rows: Iterable[JoinedRow]) -> str:
        """Write a table with the number of fusions per sample and tool.

        Absent results are left empty. Returns the name of the file.
        """
        data = []
        for row in rows:
            record: Dict[str, Any] = {"sample": row.sample_id}
            for tool in Tool:
                result = row[tool]
                if isinstance(result, Present):
                    record[tool.value] = result.record_count()
                else:
                    record[tool.value] = None
            data.append(record)

        table = pd.DataFrame(data, columns=["sample"] + [tool.value for tool in Tool])
        table.sort_values("sample", inplace=True)
        for tool in Tool:
            table[tool.value] = table[tool.value].astype("Int64")

        out_dir = os.path.join(self.root, "summary")
        os.makedirs(out_dir, exist_ok=True)
        filename = os.path.join(
            out_dir,
            "fusion_counts.%s.tsv" % utils.get_overridable_current_date(self.parameters),
        )
        table.to_csv(filename, sep="\t", index=False)
        return filename
