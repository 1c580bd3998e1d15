"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for realty map failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class InputError(PipelineError):
    """Raised when the input file cannot be used at all."""

    error_code = "INPUT_ERROR"


class RowParseError(PipelineError):
    """Raised for a single row that cannot be parsed."""

    error_code = "ROW_PARSE_ERROR"


class StoreError(PipelineError):
    """Raised when the listing store fails."""

    error_code = "STORE_ERROR"


class QueryError(PipelineError):
    """Raised for missing or malformed query parameters."""

    error_code = "QUERY_ERROR"
