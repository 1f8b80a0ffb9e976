"""The configuration module of FuSPiL."""

import shutil
import sys
from configparser import ConfigParser
from itertools import chain
from typing import Iterable, List, Optional


class Config:
    """The configuration of FuSPiL.

    This class is responsible for reading the configuration ini file.
    A plausible default value is available for all the fields, in order
    to create a template config file and ease the process of creating a
    brand new ini file.

    The paths of the reference files are only checked for the tools that
    are going to be used, see `ReferenceResolver`.
    """

    executables = (
        "star",
        "star_fusion",
        "arriba",
        "ericscript",
        "kallisto",
        "pizzly",
        "pizzly_flatten_json",
        "fusioncatcher",
        "squid",
        "annotate_squid",
        "samtools",
        "fusion_report",
        "fusion_inspector",
        "draw_fusions",
    )
    files = (
        "fasta",
        "gtf",
        "transcript",
        "star_index",
        "star_fusion_ref",
        "arriba_blacklist",
        "arriba_cytobands",
        "arriba_protein_domains",
        "ericscript_ref",
        "pizzly_index",
        "fusioncatcher_ref",
        "fusion_report_db",
    )
    parameters = ("threads", "workers", "read_length", "pizzly_k", "use_mongodb")
    int_parameters = ("threads", "workers", "read_length", "pizzly_k")
    bool_parameters = ("use_mongodb",)
    mongodb = ("database", "host", "port", "username", "password")

    def __init__(self, filename: Optional[str] = None) -> None:
        """Create a template config and fill it from a file content.

        A config file is created with a set of plausible default values.
        If a `filename` is specified, the parameters are filled with the
        content of the specified config file.
        """
        self.star = "STAR"
        self.star_fusion = "STAR-Fusion"
        self.arriba = "arriba"
        self.ericscript = "ericscript.pl"
        self.kallisto = "kallisto"
        self.pizzly = "pizzly"
        self.pizzly_flatten_json = "pizzly_flatten_json.py"
        self.fusioncatcher = "fusioncatcher"
        self.squid = "squid"
        self.annotate_squid = "AnnotateSQUIDOutput.py"
        self.samtools = "samtools"
        self.fusion_report = "fusion_report"
        self.fusion_inspector = "FusionInspector"
        self.draw_fusions = "draw_fusions.R"
        self.fasta = "GRCh38.primary_assembly.genome.fa"
        self.gtf = "gencode.annotation.gtf"
        self.transcript = "gencode.transcripts.fa"
        self.star_index = "star_index"
        self.star_fusion_ref = "star-fusion/ctat_genome_lib_build_dir"
        self.arriba_blacklist = "arriba/blacklist_hg38_GRCh38.tsv.gz"
        self.arriba_cytobands = "arriba/cytobands_hg38_GRCh38.tsv"
        self.arriba_protein_domains = "arriba/protein_domains_hg38_GRCh38.gff3"
        self.ericscript_ref = "ericscript/ericscript_db_homosapiens_ensembl84"
        self.pizzly_index = "pizzly/kallisto_index.idx"
        self.fusioncatcher_ref = "fusioncatcher/human_v98"
        self.fusion_report_db = "fusion_report_db"
        self.threads = 8
        self.workers = 5
        self.read_length = 100
        self.pizzly_k = 31
        self.use_mongodb = False
        self.mongodb_database = "fuspil"
        self.mongodb_username = "fuspil"
        self.mongodb_password = "fuspil"
        self.mongodb_host = "localhost"
        self.mongodb_port = 27017

        if filename:
            self._check_after_init(filename)

    def _check_after_init(self, filename: str) -> None:
        VALID_SECTIONS = ("EXECUTABLES", "FILES", "PARAMETERS", "MONGODB")

        parser = ConfigParser()
        parser.read(filename)
        for section_name in VALID_SECTIONS:
            if section_name not in parser:
                sys.stderr.write(
                    "WARNING: %s section in config not "
                    "found. Values are set to default\n" % section_name
                )
                continue

            section = parser[section_name]
            for key in section:
                if section_name == "MONGODB":
                    setattr(self, "mongodb_" + key, section[key])
                else:
                    setattr(self, key, section[key])

        if "PARAMETERS" in parser:
            for param in Config.int_parameters:
                if param in parser["PARAMETERS"]:
                    setattr(self, param, parser["PARAMETERS"].getint(param))
            for param in Config.bool_parameters:
                if param in parser["PARAMETERS"]:
                    setattr(self, param, parser["PARAMETERS"].getboolean(param))

        for section_name in parser.keys():
            if section_name not in chain(VALID_SECTIONS, ("DEFAULT",)):
                sys.stderr.write("WARNING: '%s' section is invalid\n" % section_name)

        if "MONGODB" in parser:
            if "port" in parser["MONGODB"]:
                self.mongodb_port = parser["MONGODB"].getint("port")

    def save(self, filename: str) -> None:
        """Save the object into a config file."""
        config = ConfigParser()

        config["EXECUTABLES"] = {
            executable: getattr(self, executable) for executable in Config.executables
        }
        config["FILES"] = {filepath: getattr(self, filepath) for filepath in Config.files}
        config["PARAMETERS"] = {
            parameter: str(getattr(self, parameter)) for parameter in Config.parameters
        }
        config["MONGODB"] = {
            mongodb_param: str(getattr(self, "mongodb_" + mongodb_param))
            for mongodb_param in Config.mongodb
        }

        with open(filename, "w") as fd:
            config.write(fd)

    def check_programs(self, names: Iterable[str]) -> List[str]:
        """Check if the specified software are available.

        Args:
            names: the config parameters of the executables to check.

        Returns:
            The parameters whose executables cannot be found.

        """
        missing: List[str] = []
        for param in names:
            executable = getattr(self, param)
            if not executable or shutil.which(executable) is None:
                missing.append(param)

        return missing
