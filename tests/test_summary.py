import logging
import os

import pandas as pd
import pytest

from conftest import FUSION_REPORT_SCRIPT
from fuspil.aggregator import JoinedRow
from fuspil.core.exceptions import PipelineError
from fuspil.core.result import Absent, AbsenceReason, Present
from fuspil.core.sample import EndType
from fuspil.references import Auxiliary, ReferenceResolver
from fuspil.summary import SummarySynthesizer
from fuspil.tools import EnablementPolicy, Tool

ENABLED = [Tool.STAR_FUSION, Tool.ARRIBA, Tool.ERICSCRIPT]


@pytest.fixture
def policy():
    return EnablementPolicy.create(ENABLED, EndType.PAIRED)


@pytest.fixture
def synthesizer(config, root_dir, parameters, policy):
    references = ReferenceResolver(config, policy).resolve()
    return SummarySynthesizer(
        root_dir, config, parameters, references[Auxiliary.SUMMARY], policy
    )


def write_result(tmp_path, name, records):
    path = tmp_path / name
    path.write_text("#header\n" + "".join("fusion%d\n" % index for index in range(records)))
    return str(path)


def make_row(sample, results):
    slots = {
        tool: Absent(sample.identifier, tool, AbsenceReason.DISABLED)
        for tool in Tool
        if tool not in ENABLED
    }
    for tool in ENABLED:
        slots[tool] = results.get(tool, Absent(sample.identifier, tool))
    return JoinedRow(sample, slots)


def test_only_contributing_tools_are_arguments(tmp_path, paired_samples):
    sample = paired_samples[0]
    star_fusion = write_result(tmp_path, "sf.tsv", 3)
    arriba = write_result(tmp_path, "arriba.tsv", 0)
    row = make_row(
        sample,
        {
            Tool.STAR_FUSION: Present("S1", Tool.STAR_FUSION, star_fusion),
            Tool.ARRIBA: Present("S1", Tool.ARRIBA, arriba),
        },
    )

    assert SummarySynthesizer.tool_arguments(row) == [("--starfusion", star_fusion)]


def test_arguments_follow_tool_order(tmp_path, paired_samples):
    ericscript = write_result(tmp_path, "ericscript.tsv", 1)
    star_fusion = write_result(tmp_path, "sf.tsv", 1)
    row = make_row(
        paired_samples[0],
        {
            Tool.ERICSCRIPT: Present("S1", Tool.ERICSCRIPT, ericscript),
            Tool.STAR_FUSION: Present("S1", Tool.STAR_FUSION, star_fusion),
        },
    )

    assert SummarySynthesizer.tool_arguments(row) == [
        ("--starfusion", star_fusion),
        ("--ericscript", ericscript),
    ]


def test_output_filenames():
    assert SummarySynthesizer.output_filenames("/out", "S1") == (
        "/out/S1_fusion_list.tsv",
        "/out/S1_fusion_genes_mqc.json",
    )


def test_all_absent_row(synthesizer, paired_samples, root_dir):
    row = make_row(paired_samples[0], {})

    summary = synthesizer.run(row)

    assert summary is not None
    assert summary.tools == []
    assert not summary.has_fusions
    assert not os.path.exists(
        os.path.join(root_dir, "fusion-report", "S1", "arguments.txt")
    )
    assert logging.getLogger("S1.2021_03_04.fusion-report").handlers == []


def test_run_fusion_report(fake_tool, synthesizer, tmp_path, paired_samples, root_dir):
    fake_tool("fusion_report", FUSION_REPORT_SCRIPT)
    star_fusion = write_result(tmp_path, "sf.tsv", 2)
    row = make_row(
        paired_samples[0],
        {Tool.STAR_FUSION: Present("S1", Tool.STAR_FUSION, star_fusion)},
    )

    summary = synthesizer.run(row)

    out_dir = os.path.join(root_dir, "fusion-report", "S1")
    assert summary.tools == [Tool.STAR_FUSION]
    assert summary.fusion_list == os.path.join(out_dir, "S1_fusion_list.tsv")
    assert summary.fusion_summary == os.path.join(out_dir, "S1_fusion_genes_mqc.json")
    assert os.path.isfile(summary.fusion_list)
    assert os.path.isfile(summary.fusion_summary)
    with open(os.path.join(out_dir, "arguments.txt")) as fd:
        arguments = fd.read().split()
    assert arguments[:3] == ["run", "S1", out_dir]
    assert arguments[4:] == ["--starfusion", star_fusion]


def test_missing_report_is_an_error(synthesizer, tmp_path, paired_samples):
    star_fusion = write_result(tmp_path, "sf.tsv", 2)
    row = make_row(
        paired_samples[0],
        {Tool.STAR_FUSION: Present("S1", Tool.STAR_FUSION, star_fusion)},
    )

    with pytest.raises(PipelineError, match="fusion_list.tsv"):
        synthesizer.run(row)


def test_debug_run_has_no_summary(config, root_dir, parameters, tmp_path, paired_samples):
    policy = EnablementPolicy.create([Tool.PIZZLY], EndType.SINGLE, debug=True)
    synthesizer = SummarySynthesizer(root_dir, config, parameters, None, policy)
    pizzly = write_result(tmp_path, "pizzly.txt", 5)
    slots = {tool: Absent("S1", tool, AbsenceReason.DISABLED) for tool in Tool}
    slots[Tool.PIZZLY] = Present("S1", Tool.PIZZLY, pizzly)

    assert not synthesizer.should_run()
    assert synthesizer.run(JoinedRow(paired_samples[0], slots)) is None


def test_write_run_summary(synthesizer, tmp_path, paired_samples, root_dir):
    star_fusion = write_result(tmp_path, "sf.tsv", 2)
    arriba = write_result(tmp_path, "arriba.tsv", 0)
    rows = [
        make_row(paired_samples[1], {}),
        make_row(
            paired_samples[0],
            {
                Tool.STAR_FUSION: Present("S1", Tool.STAR_FUSION, star_fusion),
                Tool.ARRIBA: Present("S1", Tool.ARRIBA, arriba),
            },
        ),
    ]

    filename = synthesizer.write_run_summary(rows)

    assert filename == os.path.join(root_dir, "summary", "fusion_counts.2021_03_04.tsv")
    table = pd.read_csv(filename, sep="\t", index_col="sample")
    assert list(table.columns) == [tool.value for tool in Tool]
    assert list(table.index) == ["S1", "S2"]
    assert table.loc["S1", "star_fusion"] == 2
    assert table.loc["S1", "arriba"] == 0
    assert pd.isna(table.loc["S2", "star_fusion"])
    assert pd.isna(table.loc["S1", "squid"])


def test_rerun_without_fusions_removes_old_summary(
    fake_tool, synthesizer, tmp_path, paired_samples, root_dir
):
    fake_tool("fusion_report", FUSION_REPORT_SCRIPT)
    star_fusion = write_result(tmp_path, "sf.tsv", 2)
    first = synthesizer.run(
        make_row(
            paired_samples[0],
            {Tool.STAR_FUSION: Present("S1", Tool.STAR_FUSION, star_fusion)},
        )
    )
    assert os.path.isfile(first.fusion_list)

    summary = synthesizer.run(make_row(paired_samples[0], {}))

    assert not summary.has_fusions
    out_dir = os.path.join(root_dir, "fusion-report", "S1")
    assert not os.path.exists(os.path.join(out_dir, "S1_fusion_list.tsv"))
    assert not os.path.exists(os.path.join(out_dir, "S1_fusion_genes_mqc.json"))


def test_leftover_report_is_not_renamed(synthesizer, tmp_path, paired_samples, root_dir):
    out_dir = os.path.join(root_dir, "fusion-report", "S1")
    os.makedirs(out_dir)
    for name in ("fusion_list.tsv", "fusion_genes_mqc.json"):
        with open(os.path.join(out_dir, name), "w") as fd:
            fd.write("stale\n")
    star_fusion = write_result(tmp_path, "sf.tsv", 2)
    row = make_row(
        paired_samples[0],
        {Tool.STAR_FUSION: Present("S1", Tool.STAR_FUSION, star_fusion)},
    )

    with pytest.raises(PipelineError, match="fusion_list.tsv"):
        synthesizer.run(row)
    assert not os.path.exists(os.path.join(out_dir, "S1_fusion_list.tsv"))
