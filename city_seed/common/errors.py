"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for seeding failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class StageError(PipelineError):
    """Raised for failures scoped to one location and category."""

    error_code = "STAGE_ERROR"


class StreamFailure(StageError):
    """Raised when a response body cannot be read to the end."""

    error_code = "STREAM_FAILURE"


class MalformedRecordError(StageError):
    """Raised when a raw record cannot be decoded under the strict policy."""

    error_code = "MALFORMED_RECORD"

    def __init__(self, message: str, *, missing: tuple[str, ...] = (), invalid: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.missing = missing
        self.invalid = invalid


class PersistenceFailure(PipelineError):
    """Raised when the entity sink rejects a record. Never recovered locally."""

    error_code = "PERSISTENCE_FAILURE"
