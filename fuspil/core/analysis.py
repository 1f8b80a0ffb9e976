"""The module containing the Analysis class.

See the documentation of the class for more information.
"""

import logging
import os
from typing import Any, Dict

from ..config import Config
from . import utils
from .sample import Sample


class Analysis:
    """The status for a sample inside one stage of the pipeline.

    The class contains all the data that needs to be shared between the
    commands that a stage runs for a sample: the output directory, the
    logger and the parameters of the run. Each stage works inside its own
    directory, `<root>/<stage>/<sample>`, therefore two stages never
    share their intermediate files.
    """

    def __init__(
        self,
        sample: Sample,
        stage_name: str,
        root: str,
        config: Config,
        parameters: Dict[str, Any],
    ) -> None:
        """Create a new analysis with basic elements.

        Args:
            sample: the sample to analyse.
            stage_name: the name of the stage. It is used for the output
                        directory and for the log file.
            root: the base directory in which output directories are
                  placed.
            config: a valid configuration.
            parameters: a set of additional parameters, taken from the
                        command line.
        """
        self.sample = sample
        self.stage_name = stage_name
        self.root = root
        self.config = config
        self.parameters = parameters
        self.current = utils.get_overridable_current_date(parameters)
        self.basename = "%s.%s" % (sample.identifier, self.current)
        self.out_dir = os.path.join(root, stage_name, sample.identifier)
        self.run_fake = bool(parameters.get("dry_run", False))

        os.makedirs(self.out_dir, exist_ok=True)

        logs_dir = os.path.join(self.root, "logs")
        os.makedirs(logs_dir, exist_ok=True)

        self.log_handler = logging.FileHandler(
            os.path.join(logs_dir, "%s.%s.steps.txt" % (self.basename, stage_name))
        )
        self.log_handler.setFormatter(logging.Formatter("%(asctime)-15s %(message)s"))
        self.logger = utils.create_logger(
            "%s.%s" % (self.basename, stage_name), self.log_handler
        )

    @property
    def threads(self) -> int:
        return int(self.parameters.get("threads", self.config.threads))

    @property
    def sjdb_overhang(self) -> int:
        """The STAR `--sjdbOverhang` value for the read length of the run."""
        read_length = int(self.parameters.get("read_length", self.config.read_length))
        return max(read_length - 1, 1)

    def output_path(self, filename: str) -> str:
        """Return the path of a file inside the output directory."""
        return os.path.join(self.out_dir, filename)

    def sample_filename(self, suffix: str) -> str:
        """Return the sample-scoped path `<out_dir>/<sample>_<suffix>`."""
        return self.output_path("%s_%s" % (self.sample.identifier, suffix))

    def close(self) -> None:
        """Detach and close the log file of the analysis."""
        self.logger.removeHandler(self.log_handler)
        self.log_handler.close()
