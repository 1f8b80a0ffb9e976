import pickle

import pytest

from fuspil.core.exceptions import SampleError
from fuspil.core.sample import (
    RE_FASTQ_FILENAME,
    EndType,
    Sample,
    find_fastqs,
    read_list_file,
    samples_from_list,
    scan_samples,
)


def touch(directory, *filenames):
    for filename in filenames:
        (directory / filename).write_bytes(b"")


@pytest.mark.parametrize(
    "filename, identifier, read_index",
    [
        ("S1.R1.fastq.gz", "S1", "1"),
        ("S1_R2.fastq", "S1", "2"),
        ("tumor_A_R1_001.fq.gz", "tumor_A", "1"),
        ("lib.1.R2.FASTQ", "lib.1", "2"),
    ],
)
def test_fastq_filename(filename, identifier, read_index):
    match = RE_FASTQ_FILENAME.match(filename)
    assert match is not None
    assert match.group(1) == identifier
    assert match.group(2) == read_index


def test_other_files_are_ignored(tmp_path):
    touch(tmp_path, "S1_R1.fastq", "S1_R3.fastq", "notes.txt", "S1.bam")

    assert find_fastqs(str(tmp_path)) == {"S1": {1: [str(tmp_path / "S1_R1.fastq")]}}


def test_scan_paired_samples(fastq_dir):
    samples = scan_samples(fastq_dir, EndType.PAIRED)

    assert [sample.identifier for sample in samples] == ["S1", "S2"]
    assert samples[0].end_type == EndType.PAIRED
    assert samples[0].left.endswith("S1_R1.fastq.gz")
    assert samples[0].right.endswith("S1_R2.fastq.gz")


def test_scan_single_end_samples(tmp_path):
    touch(tmp_path, "B.R1.fastq", "A.R1.fastq")

    samples = scan_samples(str(tmp_path), EndType.SINGLE)

    assert [sample.identifier for sample in samples] == ["A", "B"]
    assert samples[0].reads == (str(tmp_path / "A.R1.fastq"),)
    assert samples[0].right is None


def test_missing_mate_in_paired_run(tmp_path):
    touch(tmp_path, "S1_R1.fastq", "S1_R2.fastq", "S2_R1.fastq")

    with pytest.raises(SampleError, match="S2"):
        scan_samples(str(tmp_path), EndType.PAIRED)


def test_mate_in_single_end_run(fastq_dir):
    with pytest.raises(SampleError, match="single-end"):
        scan_samples(fastq_dir, EndType.SINGLE)


def test_ambiguous_read_files(tmp_path):
    touch(tmp_path, "S1_R1.fastq", "S1.R1.fastq.gz")

    with pytest.raises(SampleError, match="more than one R1"):
        scan_samples(str(tmp_path), EndType.SINGLE)


def test_empty_fastq_dir(tmp_path):
    with pytest.raises(SampleError):
        scan_samples(str(tmp_path), EndType.PAIRED)


def test_samples_from_list_file(tmp_path, fastq_dir):
    list_file = tmp_path / "samples.txt"
    list_file.write_text("# samples of the run\nS2\n\nS1\n")

    identifiers = read_list_file(str(list_file))
    samples = samples_from_list(identifiers, fastq_dir, EndType.PAIRED)

    assert identifiers == ["S2", "S1"]
    assert [sample.identifier for sample in samples] == ["S1", "S2"]


def test_unknown_sample_in_list(fastq_dir):
    with pytest.raises(SampleError, match="S3"):
        samples_from_list(["S1", "S3"], fastq_dir, EndType.PAIRED)


def test_duplicated_sample_in_list(fastq_dir):
    with pytest.raises(SampleError, match="more than once"):
        samples_from_list(["S1", "S1"], fastq_dir, EndType.PAIRED)


def test_sample_is_immutable():
    sample = Sample("S1", ["S1_R1.fastq"])

    with pytest.raises(AttributeError):
        sample.identifier = "S2"
    with pytest.raises(AttributeError):
        sample.other = 1


def test_sample_equality_and_pickling():
    sample = Sample("S1", ["S1_R1.fastq", "S1_R2.fastq"])
    copy = pickle.loads(pickle.dumps(sample))

    assert copy == sample
    assert hash(copy) == hash(sample)
    assert copy.reads == ("S1_R1.fastq", "S1_R2.fastq")
    assert sample != Sample("S1", ["S1_R1.fastq"])


@pytest.mark.parametrize("reads", [[], ["a", "b", "c"]])
def test_invalid_number_of_reads(reads):
    with pytest.raises(SampleError):
        Sample("S1", reads)
