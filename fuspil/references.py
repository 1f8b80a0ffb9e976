"""Resolution of the reference files needed by the enabled stages.

Each fusion tool needs its own set of reference files, and loading the
whole set of references for a run where only one tool is enabled is a
waste of time and a source of pointless configuration errors. The
`ReferenceResolver` collects only the files that are going to be used
and it checks all of them at once, so that the user can fix the
configuration in one go.
"""
import os
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Tuple, Union

from .config import Config
from .core.exceptions import ConfigError
from .tools import EnablementPolicy, Tool


class Auxiliary(Enum):
    """The stages that are not fusion callers but need references."""

    SUMMARY = "summary"
    FUSION_INSPECTOR = "fusion_inspector"
    ARRIBA_VISUALIZATION = "arriba_visualization"


Consumer = Union[Tool, Auxiliary]

DIRECTORY = "directory"
FILE = "file"

REQUIREMENTS: Dict[Consumer, Tuple[Tuple[str, str], ...]] = {
    Tool.STAR_FUSION: (("star_fusion_ref", DIRECTORY),),
    Tool.ARRIBA: (
        ("star_index", DIRECTORY),
        ("fasta", FILE),
        ("gtf", FILE),
        ("arriba_blacklist", FILE),
    ),
    Tool.ERICSCRIPT: (("ericscript_ref", DIRECTORY),),
    Tool.PIZZLY: (("pizzly_index", FILE), ("transcript", FILE), ("gtf", FILE)),
    Tool.FUSIONCATCHER: (("fusioncatcher_ref", DIRECTORY),),
    Tool.SQUID: (("star_index", DIRECTORY), ("gtf", FILE)),
    Auxiliary.SUMMARY: (("fusion_report_db", DIRECTORY),),
    Auxiliary.FUSION_INSPECTOR: (("star_fusion_ref", DIRECTORY),),
    Auxiliary.ARRIBA_VISUALIZATION: (
        ("gtf", FILE),
        ("arriba_cytobands", FILE),
        ("arriba_protein_domains", FILE),
    ),
}

PROGRAMS: Dict[Consumer, Tuple[str, ...]] = {
    Tool.STAR_FUSION: ("star", "star_fusion"),
    Tool.ARRIBA: ("star", "arriba"),
    Tool.ERICSCRIPT: ("ericscript",),
    Tool.PIZZLY: ("kallisto", "pizzly", "pizzly_flatten_json"),
    Tool.FUSIONCATCHER: ("fusioncatcher",),
    Tool.SQUID: ("star", "samtools", "squid", "annotate_squid"),
    Auxiliary.SUMMARY: ("fusion_report",),
    Auxiliary.FUSION_INSPECTOR: ("fusion_inspector",),
    Auxiliary.ARRIBA_VISUALIZATION: ("draw_fusions",),
}


class ReferenceBundle(Mapping[str, str]):
    """The reference paths for one consumer, indexed by config name."""

    def __init__(self, consumer: Consumer, paths: Mapping[str, str]) -> None:
        self.consumer = consumer
        self._paths = dict(paths)

    def __getitem__(self, key: str) -> str:
        try:
            return self._paths[key]
        except KeyError:
            raise KeyError(
                "reference '%s' is not available for %s" % (key, self.consumer.value)
            )

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return "ReferenceBundle(%s, %r)" % (self.consumer.value, self._paths)


class ReferenceResolver:
    """Validate and collect the reference bundles for a run."""

    def __init__(self, config: Config, policy: EnablementPolicy) -> None:
        self.config = config
        self.policy = policy

    def consumers(
        self, fusion_inspector: bool = False, arriba_visualization: bool = False
    ) -> List[Consumer]:
        """Return the stages that will run and need references."""
        consumers: List[Consumer] = list(self.policy.enabled_tools)
        if self.policy.synthesis_enabled:
            consumers.append(Auxiliary.SUMMARY)
            if fusion_inspector:
                consumers.append(Auxiliary.FUSION_INSPECTOR)
        if arriba_visualization and self.policy.runs(Tool.ARRIBA):
            consumers.append(Auxiliary.ARRIBA_VISUALIZATION)

        return consumers

    @staticmethod
    def _check_path(param: str, path: str, kind: str) -> List[str]:
        if not path:
            return ["%s is not set" % param]

        if kind == DIRECTORY:
            if not os.path.isdir(path):
                return ["%s '%s' is not a valid directory" % (param, path)]
        elif not os.access(path, os.R_OK) or os.path.isdir(path):
            return ["%s '%s' cannot be read" % (param, path)]

        return []

    def resolve(
        self, fusion_inspector: bool = False, arriba_visualization: bool = False
    ) -> Dict[Consumer, ReferenceBundle]:
        """Return the reference bundles for the stages that will run.

        Raises:
            ConfigError: at least one of the required references is
                         missing. The message contains all the problems.

        """
        errors: List[str] = []
        checked = set()
        bundles: Dict[Consumer, ReferenceBundle] = {}
        for consumer in self.consumers(fusion_inspector, arriba_visualization):
            paths: Dict[str, str] = {}
            for param, kind in REQUIREMENTS[consumer]:
                path = getattr(self.config, param)
                paths[param] = path
                if param in checked:
                    continue

                checked.add(param)
                errors.extend(
                    "%s (needed by %s)" % (error, consumer.value)
                    for error in ReferenceResolver._check_path(param, path, kind)
                )

            bundles[consumer] = ReferenceBundle(consumer, paths)

        if errors:
            raise ConfigError(
                "not every reference inside configuration is correctly set:\n  "
                + "\n  ".join(errors)
            )

        return bundles

    def required_programs(
        self, fusion_inspector: bool = False, arriba_visualization: bool = False
    ) -> List[str]:
        """Return the config names of the executables that will be used."""
        programs: List[str] = []
        for consumer in self.consumers(fusion_inspector, arriba_visualization):
            for program in PROGRAMS[consumer]:
                if program not in programs:
                    programs.append(program)

        return programs

    def check_programs(
        self, fusion_inspector: bool = False, arriba_visualization: bool = False
    ) -> None:
        """Check the executables that will be used.

        Raises:
            ConfigError: some executables cannot be found.

        """
        missing = self.config.check_programs(
            self.required_programs(fusion_inspector, arriba_visualization)
        )
        if missing:
            raise ConfigError(
                "not every program inside configuration is correctly set: "
                + ", ".join(
                    "%s ('%s')" % (param, getattr(self.config, param))
                    for param in missing
                )
            )
