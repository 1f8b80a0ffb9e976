import os

import pandas as pd
import pytest

from fuspil.config import Config
from fuspil.fuspil import get_parser, main
from fuspil.tools import Tool


@pytest.fixture
def config_file(tmp_path, config):
    filename = str(tmp_path / "config.ini")
    config.save(filename)
    return filename


def run_main(arguments):
    with pytest.raises(SystemExit) as error:
        main(arguments)
    return error.value.code


def test_tool_flags():
    args = get_parser().parse_args(["--star-fusion", "--squid", "--single-end"])

    assert args.tools == [Tool.STAR_FUSION, Tool.SQUID]
    assert args.single_end
    assert not args.debug


def test_configout(tmp_path, capsys):
    filename = str(tmp_path / "template.ini")

    assert run_main(["--configout", filename]) == 0
    assert Config(filename).star_fusion == "STAR-Fusion"
    assert "Sample config written" in capsys.readouterr().out


def test_mandatory_arguments(capsys):
    assert run_main(["--arriba"]) == -1
    assert "mandatory" in capsys.readouterr().out


def test_missing_config_file(tmp_path, root_dir, fastq_dir, capsys):
    code = run_main(
        [
            "--arriba",
            "--scan-samples",
            "--root-dir",
            root_dir,
            "--fastq-dir",
            fastq_dir,
            "--config",
            str(tmp_path / "missing.ini"),
        ]
    )

    assert code == -1
    assert "ERROR: config file" in capsys.readouterr().out


def test_no_tool_enabled(config_file, root_dir, fastq_dir, capsys):
    code = run_main(
        [
            "--scan-samples",
            "--root-dir",
            root_dir,
            "--fastq-dir",
            fastq_dir,
            "-c",
            config_file,
        ]
    )

    assert code == -1
    assert "no fusion tool is enabled" in capsys.readouterr().out


def test_missing_reference(tmp_path, config, root_dir, fastq_dir, capsys):
    config.fusioncatcher_ref = str(tmp_path / "missing")
    filename = str(tmp_path / "config.ini")
    config.save(filename)

    code = run_main(
        [
            "--fusioncatcher",
            "--scan-samples",
            "--root-dir",
            root_dir,
            "--fastq-dir",
            fastq_dir,
            "-c",
            filename,
        ]
    )

    assert code == -1
    assert "fusioncatcher_ref" in capsys.readouterr().out


def test_invalid_samples(config_file, root_dir, fastq_dir, capsys):
    code = run_main(
        [
            "--arriba",
            "--single-end",
            "--scan-samples",
            "--root-dir",
            root_dir,
            "--fastq-dir",
            fastq_dir,
            "-c",
            config_file,
        ]
    )

    assert code == -2
    assert "single-end" in capsys.readouterr().out


def test_dry_run(config_file, root_dir, fastq_dir, tmp_path):
    list_file = tmp_path / "samples.txt"
    list_file.write_text("S1\nS2\n")

    main(
        [
            "--star-fusion",
            "--pizzly",
            "--dry-run",
            "--list-file",
            str(list_file),
            "--root-dir",
            root_dir,
            "--fastq-dir",
            fastq_dir,
            "-c",
            config_file,
            "--use-date",
            "2022_05_06",
        ]
    )

    table = pd.read_csv(
        os.path.join(root_dir, "summary", "fusion_counts.2022_05_06.tsv"), sep="\t"
    )
    assert list(table["sample"]) == ["S1", "S2"]
    assert table["star_fusion"].isna().all()
    assert os.path.isdir(os.path.join(root_dir, "pizzly", "S2"))


def test_run(fusion_scripts, config, tmp_path, root_dir, fastq_dir):
    filename = str(tmp_path / "config.ini")
    config.save(filename)

    main(
        [
            "--star-fusion",
            "--arriba",
            "--scan-samples",
            "--root-dir",
            root_dir,
            "--fastq-dir",
            fastq_dir,
            "-c",
            filename,
            "--workers",
            "3",
            "--use-date",
            "2022_05_06",
        ]
    )

    assert os.path.isfile(
        os.path.join(root_dir, "fusion-report", "S1", "S1_fusion_list.tsv")
    )


def test_stage_failure(fake_tool, config, tmp_path, root_dir, fastq_dir, capsys):
    fake_tool("fusioncatcher", "exit 1\n")
    filename = str(tmp_path / "config.ini")
    config.save(filename)

    code = run_main(
        [
            "--fusioncatcher",
            "--scan-samples",
            "--root-dir",
            root_dir,
            "--fastq-dir",
            fastq_dir,
            "-c",
            filename,
        ]
    )

    assert code == -1
    assert "PipelineError" in capsys.readouterr().err
