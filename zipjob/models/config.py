"""
Pydantic model for service configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

# Hard ceiling on items per job; not configurable.
MAX_ITEMS = 3


class ServiceConfig(BaseModel):
    """A validated configuration model for the service."""

    # HTTP front end
    host: str = "127.0.0.1"
    port: int = 8080
    files_prefix: str = "/files/"

    # Job execution
    max_parallel: int = 3
    fetch_timeout: float = 15.0
    max_file_mb: int = 25
    fetch_attempts: int = 1

    # Storage
    staging_dir: str = "tmp"
    output_dir: str = "results"
    json_log_dir: str = ""

    # Internal field not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535.")
        return v

    @field_validator("max_parallel")
    @classmethod
    def validate_parallel(cls, v: int) -> int:
        """Ensures a reasonable number of concurrently running jobs."""
        if v < 1 or v > 64:
            raise ValueError("Max parallel jobs must be between 1 and 64.")
        return v

    @field_validator("fetch_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Fetch timeout must be a positive number of seconds.")
        return v

    @field_validator("max_file_mb")
    @classmethod
    def validate_max_file_mb(cls, v: int) -> int:
        if v < 1 or v > 1024:
            raise ValueError("Max file size must be between 1 and 1024 MB.")
        return v

    @field_validator("fetch_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1 or v > 5:
            raise ValueError("Fetch attempts must be between 1 and 5.")
        return v

    @field_validator("files_prefix")
    @classmethod
    def validate_files_prefix(cls, v: str) -> str:
        """Validates the URL prefix the output directory is served under."""
        if not v.startswith("/") or not v.endswith("/") or v == "/":
            raise ValueError(
                "Files prefix must start and end with '/', e.g. '/files/'."
            )
        return v

    @model_validator(mode="after")
    def validate_directories(self) -> "ServiceConfig":
        """Checks that staging and output locations are usable and distinct."""
        if not self.staging_dir or not self.output_dir:
            raise ValueError("Staging and output directories cannot be empty.")
        if self.staging_dir == self.output_dir:
            raise ValueError(
                "Staging and output directories must be different, staging "
                "directories are removed after every job."
            )
        return self

    @property
    def max_file_bytes(self) -> int:
        return self.max_file_mb * 1024 * 1024

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
