"""The module to run the external commands of a stage.

Every external software is run through an `Executor`, which logs the
command and its output in the log of the analysis and converts a
failure of the process into a `PipelineError`. In this way a crash of an
external tool is never confused with a tool that simply did not produce
any result.
"""
import os
import shlex
from typing import Any, Callable, Iterable, Optional, Union

from . import utils
from .analysis import Analysis
from .exceptions import PipelineError


def quote(value: Any) -> str:
    """Quote a value to be safely used inside a shell command."""
    return shlex.quote(str(value))


def quote_all(values: Iterable[Any], separator: str = " ") -> str:
    """Quote each value and join them using `separator`."""
    return separator.join(quote(value) for value in values)


class Executor:
    """Run commands for an `Analysis`.

    The commands are run inside the output directory of the analysis.
    When the analysis is fake (dry run), the commands are only logged.
    """

    def __init__(self, analysis: Analysis) -> None:
        self.analysis = analysis

    def __call__(
        self,
        command: Union[str, Callable[..., None]],
        error_string: Optional[str] = None,
        exception_string: Optional[str] = None,
        cwd: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        """Run a command.

        Args:
            command: a shell command or a function. A function is called
                     with `analysis` and all the `kwargs`.
            error_string: the message logged when the command fails. It
                          can contain `{status}`, `{sample}` and any
                          key in `kwargs` between braces.
            exception_string: the message of the raised exception. The
                              same replacements of `error_string` are
                              available.
            cwd: the working directory. If `None`, the output directory
                 of the analysis is used.

        Raises:
            PipelineError: the command exited with a non-zero status or
                           the function raised an exception.

        """
        working_dir = cwd if cwd is not None else self.analysis.out_dir

        if isinstance(command, str):
            if not self.analysis.run_fake:
                status = utils.run_and_log(command, self.analysis.logger, working_dir)
            else:
                self.analysis.logger.info("Faking command '%s'", command)
                status = 0
            arg_zero = os.path.basename(command.split(" ")[0])
        else:
            arg_zero = getattr(command, "__name__", "function")
            if not self.analysis.run_fake:
                try:
                    command(analysis=self.analysis, **kwargs)
                except OSError as error:
                    self.analysis.logger.error("%s failed: %s", arg_zero, error)
                    raise PipelineError("%s error: %s" % (arg_zero, error))
            else:
                self.analysis.logger.info("Faking function '%s'", arg_zero)
            status = 0

        if status != 0:
            params = dict(kwargs)
            params.update(
                {"status": status, "sample": self.analysis.sample.identifier}
            )
            if error_string is None:
                error_string = "%s exited with status {status}" % arg_zero
            if exception_string is None:
                exception_string = "%s error for sample {sample}" % arg_zero

            try:
                error_message = error_string.format(**params)
                exception_message = exception_string.format(**params)
            except (KeyError, IndexError) as error:
                raise PipelineError("cannot replace parameter %s" % error)

            self.analysis.logger.error(error_message)
            raise PipelineError(exception_message)

    def remove(self, filename: str) -> bool:
        """Remove a file inside the output directory, if it exists.

        When the analysis is fake the file is kept.

        Returns:
            Whether the file has been removed.

        """
        filename = os.path.join(self.analysis.out_dir, filename)
        if not os.path.exists(filename):
            return False

        if self.analysis.run_fake:
            self.analysis.logger.info("Faking removal of %s", filename)
            return False

        self.analysis.logger.info("Removing %s", filename)
        os.remove(filename)
        return True

    def rename(self, source: str, destination: str) -> bool:
        """Rename a file inside the output directory, if it exists.

        Relative paths are relative to the output directory.

        Returns:
            Whether the file has been renamed.

        """
        source = os.path.join(self.analysis.out_dir, source)
        destination = os.path.join(self.analysis.out_dir, destination)
        if not os.path.exists(source):
            return False

        self.analysis.logger.info("Renaming %s to %s", source, destination)
        os.replace(source, destination)
        return True
