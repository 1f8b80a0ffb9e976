import argparse
import logging
import os
import sys
import traceback
from typing import Any, Dict, List, Optional

from .config import Config
from .core import utils
from .core.exceptions import (
    AggregationError,
    ConfigError,
    DataError,
    PipelineError,
    SampleError,
)
from .core.sample import (
    EndType,
    Sample,
    read_list_file,
    samples_from_list,
    scan_samples,
)
from .references import ReferenceResolver
from .runner import Runner
from .tools import EnablementPolicy, Tool


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Detects gene fusions in RNA-Seq data using a set of "
        "different tools, and merges their results."
    )

    tools_group = parser.add_argument_group("fusion tools")
    for tool in Tool:
        tools_group.add_argument(
            "--" + tool.directory_name,
            action="append_const",
            dest="tools",
            const=tool,
            help="Run %s." % tool.directory_name
            + (" Needs paired-end reads." if tool.paired_end_only else ""),
        )

    parser.add_argument(
        "--single-end",
        action="store_true",
        help="The reads are single-end. Tools that need paired-end reads "
        "are skipped, unless --debug is passed.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run the enabled tools even if they are not compatible with "
        "the reads. The summary is not created in this mode.",
    )
    parser.add_argument(
        "--fusion-inspector",
        action="store_true",
        help="Validate the fusions of the summary with FusionInspector.",
    )
    parser.add_argument(
        "--arriba-vis",
        action="store_true",
        dest="arriba_visualization",
        help="Draw the fusions found by Arriba.",
    )
    parser.add_argument(
        "--configout",
        action="store",
        metavar="filename",
        help="Dumps a default configuration in a file.\nWhen this option "
        "is passed, any other option will be ignored and the program will "
        "exit after the file is being written.",
    )
    parser.add_argument(
        "--config",
        "-c",
        action="store",
        metavar="config.ini",
        help="Select the configuration file. If it is not "
        "specified, the program will try to search for a file "
        "called 'config.ini' in the current working "
        "directory. If it is not available, an error will be "
        "raised.",
    )
    parser.add_argument(
        "--threads",
        metavar="n",
        action="store",
        type=int,
        default=None,
        help="Number of threads for each tool. "
        "If unspecified, the value in the config is used.",
    )
    parser.add_argument(
        "--workers",
        metavar="n",
        action="store",
        type=int,
        default=None,
        help="Number of tools running at the same time. "
        "If unspecified, the value in the config is used.",
    )
    parser.add_argument(
        "--read-length",
        metavar="n",
        action="store",
        type=int,
        default=None,
        help="The length of the reads, used for the STAR indexes. "
        "If unspecified, the value in the config is used.",
    )
    parser.add_argument(
        "--use-date",
        action="store",
        default=None,
        type=utils.parsed_date,
        metavar="YYYY_MM_DD",
        dest="use_date",
        help="Use the specified date instead of the current one",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only log the commands, without running them.",
    )

    list_file_group = parser.add_mutually_exclusive_group(required=False)
    list_file_group.add_argument(
        "--list-file",
        action="store",
        help="The name of the file containing the name of the samples, one by line.",
    )
    list_file_group.add_argument(
        "--scan-samples",
        action="store_true",
        help="Scan for sample files instead of reading them from a file",
    )
    parser.add_argument(
        "--root-dir", action="store", help="The root directory for the analysis"
    )
    parser.add_argument(
        "--fastq-dir",
        action="store",
        help="The directory where the FASTQ files of the samples are located.",
    )
    return parser


def load_config(filename: Optional[str]) -> Config:
    if filename is not None:
        if os.path.exists(filename):
            return Config(filename)
        else:
            print("ERROR: config file '%s' does not exist." % filename)
            sys.exit(-1)
    else:
        if os.path.exists("config.ini"):
            return Config("config.ini")
        else:
            print(
                "ERROR: config file 'config.ini' does not exist in the "
                "current directory.\nPlease use '--configout' option to "
                "create a config file, then specify it with the '--config' "
                "option or just name it 'config.ini' and put in the current "
                "directory."
            )
            sys.exit(-1)


def get_samples(args: argparse.Namespace, end_type: EndType) -> List[Sample]:
    """Discover the samples using the list file or scanning the FASTQs."""
    if args.list_file:
        return samples_from_list(
            read_list_file(args.list_file), args.fastq_dir, end_type
        )
    elif args.scan_samples:
        return scan_samples(args.fastq_dir, end_type)
    else:
        raise RuntimeError("Unhandled condition")


def get_parameters(args: argparse.Namespace, config: Config) -> Dict[str, Any]:
    return {
        "threads": args.threads if args.threads is not None else config.threads,
        "workers": args.workers if args.workers is not None else config.workers,
        "read_length": args.read_length
        if args.read_length is not None
        else config.read_length,
        "pizzly_k": config.pizzly_k,
        "use_date": args.use_date,
        "dry_run": args.dry_run,
    }


def main(argv: Optional[List[str]] = None) -> None:
    parser = get_parser()
    args = parser.parse_args(argv)

    if args.configout is not None:
        config = Config()
        config.save(args.configout)
        print("Sample config written to '%s'" % args.configout)
        sys.exit(0)
    elif (
        (not args.list_file and not args.scan_samples)
        or not args.root_dir
        or not args.fastq_dir
    ):
        print(
            "--list-file (or --scan-samples), --root-dir and --fastq-dir "
            "are mandatory unless --configout is specified"
        )
        parser.print_usage()
        sys.exit(-1)

    config = load_config(args.config)

    if args.list_file is not None and not os.path.exists(args.list_file):
        print("ERROR: list_file '%s' does not exist." % args.list_file)
        sys.exit(-2)

    if not os.path.isdir(args.root_dir):
        print("ERROR: root_dir '%s' is not a valid directory." % args.root_dir)
        sys.exit(-2)

    if not os.path.isdir(args.fastq_dir):
        print("ERROR: fastq_dir '%s' is not a valid directory." % args.fastq_dir)
        sys.exit(-3)

    if config.use_mongodb:
        try:
            import pymongo  # noqa: F401
        except ImportError:
            print(
                "ERROR: use_mongodb is set to true inside config file but "
                "pymongo is not installed. Please install it using pip3."
            )
            sys.exit(-4)

    args.fastq_dir = os.path.abspath(args.fastq_dir)
    args.root_dir = os.path.abspath(args.root_dir)

    logging.basicConfig(format="%(asctime)-15s %(message)s")
    logger = logging.getLogger("fuspil")

    end_type = EndType.from_single_end(args.single_end)
    try:
        policy = EnablementPolicy.create(
            args.tools or [], end_type, args.debug, logger
        )
        resolver = ReferenceResolver(config, policy)
        if not args.dry_run:
            resolver.check_programs(args.fusion_inspector, args.arriba_visualization)
        references = resolver.resolve(args.fusion_inspector, args.arriba_visualization)
    except ConfigError as error:
        print("ERROR: %s" % error)
        print("Please fix the problem and try again.")
        sys.exit(-1)

    try:
        samples = get_samples(args, end_type)
    except SampleError as error:
        print("ERROR: %s" % error)
        sys.exit(-2)

    if args.debug:
        logger.warning("Debug mode: the summary of the fusions will not be created")

    parameters = get_parameters(args, config)
    runner = Runner(args.root_dir, config, parameters, policy, references)
    try:
        runner.run(samples)
    except (PipelineError, AggregationError, DataError):
        traceback.print_exc()
        sys.exit(-1)
