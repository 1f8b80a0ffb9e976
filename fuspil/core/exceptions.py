"""A small set of custom exceptions."""


class PipelineError(RuntimeError):
    """An exception generated during pipeline execution.

    Generally this exception is raised within `Executor` when an
    external process exits with a non-zero status. It always means that
    the run must be aborted.
    """


class ConfigError(RuntimeError):
    """An exception generated in case of an invalid configuration.

    It is raised before any stage is executed.
    """


class SampleError(RuntimeError):
    """An exception generated in case of invalid input samples."""


class AggregationError(RuntimeError):
    """An exception generated when the per-sample join is inconsistent."""


class DataError(RuntimeError):
    """An exception raised when a result file cannot be parsed."""
