import os
import stat
from typing import Callable, Dict, List

import pytest

from fuspil.config import Config
from fuspil.core.sample import EndType, Sample, scan_samples

REFERENCE_DIRECTORIES = (
    "star_index",
    "star_fusion_ref",
    "ericscript_ref",
    "fusioncatcher_ref",
    "fusion_report_db",
)

USE_DATE = "2021_03_04"

STAR_SCRIPT = "touch Aligned.sortedByCoord.out.bam Chimeric.out.junction Chimeric.out.sam\n"

# only S1 has a fusion
STAR_FUSION_SCRIPT = """\
printf '#FusionName\\tJunctionReadCount\\tSpanningFragCount\\n' > star-fusion.fusion_predictions.tsv
case "$*" in
    *S1_R1*) printf 'BCR--ABL1\\t12\\t3\\n' >> star-fusion.fusion_predictions.tsv ;;
esac
"""

# header only, Arriba never finds anything
ARRIBA_SCRIPT = """\
while [ $# -gt 0 ]; do
    case "$1" in
        -o) out="$2"; shift ;;
    esac
    shift
done
printf '#gene1\\tgene2\\tsplit_reads1\\n' > "$out"
"""

FUSION_REPORT_SCRIPT = """\
echo "$@" > "$3/arguments.txt"
printf 'Fusion\\tstarfusion\\nBCR--ABL1\\t1\\n' > "$3/fusion_list.tsv"
echo '{}' > "$3/fusion_genes_mqc.json"
"""


def write_script(filename: str, body: str) -> str:
    """Write an executable shell script and return its path."""
    with open(filename, "w") as fd:
        fd.write("#!/bin/sh\n")
        fd.write(body)
    mode = os.stat(filename).st_mode
    os.chmod(filename, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(filename)


@pytest.fixture
def reference_paths(tmp_path) -> Dict[str, str]:
    references_dir = tmp_path / "references"
    references_dir.mkdir()
    paths = {}
    for param in Config.files:
        path = references_dir / param
        if param in REFERENCE_DIRECTORIES:
            path.mkdir()
        else:
            path.write_text("reference\n")
        paths[param] = str(path)
    return paths


@pytest.fixture
def bin_dir(tmp_path):
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def config(reference_paths, bin_dir) -> Config:
    """A config where every executable is a script that does nothing."""
    config = Config()
    for param, path in reference_paths.items():
        setattr(config, param, path)
    for param in Config.executables:
        setattr(config, param, write_script(str(bin_dir / param), "exit 0\n"))
    config.threads = 2
    config.workers = 2
    return config


@pytest.fixture
def fake_tool(config, bin_dir) -> Callable[[str, str], str]:
    """Replace the executable `param` of the config with a script."""

    def install(param: str, body: str) -> str:
        filename = write_script(str(bin_dir / param), body)
        setattr(config, param, filename)
        return filename

    return install


@pytest.fixture
def fusion_scripts(fake_tool) -> None:
    fake_tool("star", STAR_SCRIPT)
    fake_tool("star_fusion", STAR_FUSION_SCRIPT)
    fake_tool("arriba", ARRIBA_SCRIPT)
    fake_tool("fusion_report", FUSION_REPORT_SCRIPT)


@pytest.fixture
def root_dir(tmp_path) -> str:
    path = tmp_path / "analysis"
    path.mkdir()
    return str(path)


@pytest.fixture
def fastq_dir(tmp_path) -> str:
    path = tmp_path / "fastq"
    path.mkdir()
    for sample in ("S1", "S2"):
        for read_index in (1, 2):
            (path / ("%s_R%d.fastq.gz" % (sample, read_index))).write_bytes(b"")
    return str(path)


@pytest.fixture
def paired_samples(fastq_dir) -> List[Sample]:
    return scan_samples(fastq_dir, EndType.PAIRED)


@pytest.fixture
def parameters() -> Dict[str, object]:
    return {"use_date": USE_DATE, "threads": 2, "workers": 2, "read_length": 100}
