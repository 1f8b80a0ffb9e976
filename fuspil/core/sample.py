"""The samples of a run and their discovery.

A sample is the unit of work of FuSPiL: an identifier and the FASTQ
files with its reads. The files are searched inside the FASTQ directory
using the read index in the filename, with one of these layouts:

    sample1.R1.fastq.gz    sample1.R2.fastq.gz
    sample1_R1.fastq.gz    sample1_R2.fastq.gz
    sample1_R1_001.fastq   sample1_R2_001.fastq

A run is either single-end (only the R1 file is expected) or paired-end
(both R1 and R2 must exist) for all the samples.
"""
import os
import re
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import SampleError


class EndType(Enum):
    """The sequencing layout, fixed for the whole run."""

    SINGLE = 1
    PAIRED = 2

    @staticmethod
    def from_single_end(single_end: bool) -> "EndType":
        return EndType.SINGLE if single_end else EndType.PAIRED


class Sample:
    """A sample identifier paired with its read files.

    Instances are immutable and can be used as dict keys. The reads are
    ordered: the first element is always R1.
    """

    __slots__ = ("_identifier", "_reads")

    def __init__(self, identifier: str, reads: Iterable[str]) -> None:
        reads_tuple = tuple(reads)
        if not identifier:
            raise SampleError("sample identifier cannot be empty")
        if len(reads_tuple) not in (1, 2):
            raise SampleError(
                "sample '%s' must have one or two read files, found %d"
                % (identifier, len(reads_tuple))
            )

        object.__setattr__(self, "_identifier", identifier)
        object.__setattr__(self, "_reads", reads_tuple)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Sample is immutable")

    def __reduce__(self) -> Tuple[type, Tuple[str, Tuple[str, ...]]]:
        return (Sample, (self._identifier, self._reads))

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def reads(self) -> Tuple[str, ...]:
        return self._reads

    @property
    def end_type(self) -> EndType:
        return EndType.PAIRED if len(self._reads) == 2 else EndType.SINGLE

    @property
    def left(self) -> str:
        return self._reads[0]

    @property
    def right(self) -> Optional[str]:
        if len(self._reads) == 2:
            return self._reads[1]
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sample):
            return NotImplemented
        return self._identifier == other._identifier and self._reads == other._reads

    def __hash__(self) -> int:
        return hash((self._identifier, self._reads))

    def __repr__(self) -> str:
        return "Sample(%r, %r)" % (self._identifier, self._reads)


RE_FASTQ_FILENAME = re.compile(
    r"^(.+?)(?:\.R|_R)([12])(?:_\d{3})?\.f(?:ast)?q(?:\.gz)?$", re.I
)


def find_fastqs(fastq_dir: str) -> Dict[str, Dict[int, List[str]]]:
    """Search for FASTQ files and group them by sample.

    Returns:
        A dict that maps each sample identifier to a dict from the read
        index (1 or 2) to the list of matching files, with their full
        path.

    """
    fastqs: Dict[str, Dict[int, List[str]]] = {}
    for filename in sorted(os.listdir(fastq_dir)):
        match = RE_FASTQ_FILENAME.match(filename)
        if not match:
            continue

        sample_reads = fastqs.setdefault(match.group(1), {})
        sample_reads.setdefault(int(match.group(2)), []).append(
            os.path.join(fastq_dir, filename)
        )

    return fastqs


def _create_sample(
    identifier: str, reads_by_index: Dict[int, List[str]], end_type: EndType
) -> Sample:
    for read_index, filenames in reads_by_index.items():
        if len(filenames) > 1:
            raise SampleError(
                "sample '%s' has more than one R%d file: %s"
                % (identifier, read_index, ", ".join(filenames))
            )

    if 1 not in reads_by_index:
        raise SampleError("sample '%s' has no R1 file" % identifier)

    if end_type == EndType.PAIRED:
        if 2 not in reads_by_index:
            raise SampleError(
                "sample '%s' has no R2 file, but the run is paired-end" % identifier
            )
        return Sample(identifier, (reads_by_index[1][0], reads_by_index[2][0]))
    else:
        if 2 in reads_by_index:
            raise SampleError(
                "sample '%s' has a R2 file, but the run is single-end" % identifier
            )
        return Sample(identifier, (reads_by_index[1][0],))


def scan_samples(fastq_dir: str, end_type: EndType) -> List[Sample]:
    """Create a sample for each identifier found in `fastq_dir`."""
    fastqs = find_fastqs(fastq_dir)
    if not fastqs:
        raise SampleError("no FASTQ files found in '%s'" % fastq_dir)

    return [
        _create_sample(identifier, reads, end_type)
        for identifier, reads in sorted(fastqs.items())
    ]


def read_list_file(list_file: str) -> List[str]:
    """Read the sample identifiers from a file, one by line.

    Blank lines and lines starting with '#' are ignored.
    """
    identifiers: List[str] = []
    with open(list_file) as fd:
        for line in fd:
            line = line.strip()
            if line == "" or line.startswith("#"):
                continue
            identifiers.append(line)

    return identifiers


def samples_from_list(
    identifiers: Iterable[str], fastq_dir: str, end_type: EndType
) -> List[Sample]:
    """Create the samples listed in `identifiers`.

    Every identifier must be unique and must have its FASTQ files inside
    `fastq_dir`.
    """
    fastqs = find_fastqs(fastq_dir)
    seen = set()
    samples: List[Sample] = []
    for identifier in identifiers:
        if identifier in seen:
            raise SampleError("sample '%s' is listed more than once" % identifier)
        seen.add(identifier)

        if identifier not in fastqs:
            raise SampleError("cannot find any file for sample %s" % identifier)
        samples.append(_create_sample(identifier, fastqs[identifier], end_type))

    return sorted(samples, key=lambda sample: sample.identifier)
