"""Run configuration for fsreap.

Thresholds, the exclusion rule and mode switches are carried by a single
validated model that is passed into each component. Values come from an
optional TOML file (``~/.config/fsreap/config.toml`` by default) with
command-line flags layered on top.

Example config.toml::

    start_percent = 10
    stop_percent = 25
    inode_percent = 5
    exclude = "/(lost\\+found|\\.snapshot)(/|$)"
    preserve_directories = true
"""

import logging
import re
import tomllib
from pathlib import Path
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from fsreap.core.errors import InvalidConfiguration, UsageError
from fsreap.core.paths import get_config_path

logger = logging.getLogger(__name__)

DEFAULT_START_PERCENT = 20
DEFAULT_INODE_PERCENT = 20

# Matched against the root-relative path, which always starts with "/"
DEFAULT_EXCLUDE = r"/lost\+found(/|$)"


class ReapConfig(BaseModel):
    """Validated settings for one fsreap run.

    Attributes:
        start_percent: Free-space percentage at or below which cleaning starts.
        stop_percent: Free-space percentage that must be exceeded before
            cleaning stops. Defaults to ``start_percent``.
        inode_percent: Free-inode percentage used as both start and stop floor.
        exclude: Regular expression for root-relative paths to leave alone.
        preserve_directories: Neither inventory nor remove directories.
        statistics: Report the access-time distribution instead of deleting.
        dry_run: Walk the eviction order without removing anything.
        one_filesystem: Do not descend into directories on other filesystems.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    start_percent: Annotated[
        int,
        Field(ge=0, le=100, description="Start floor for free bytes (0-100)"),
    ] = DEFAULT_START_PERCENT
    stop_percent: Annotated[
        int,
        Field(ge=0, le=100, description="Stop floor for free bytes (0-100)"),
    ] = DEFAULT_START_PERCENT
    inode_percent: Annotated[
        int,
        Field(ge=0, le=100, description="Floor for free inodes (0-100)"),
    ] = DEFAULT_INODE_PERCENT
    exclude: Annotated[
        str,
        Field(description="Exclusion regex anchored at the tree root"),
    ] = DEFAULT_EXCLUDE
    preserve_directories: bool = False
    statistics: bool = False
    dry_run: bool = False
    one_filesystem: bool = True

    @model_validator(mode="before")
    @classmethod
    def _default_stop_to_start(cls, data: Any) -> Any:
        """Use the start percentage when no stop percentage is given."""
        if isinstance(data, dict) and data.get("stop_percent") is None:
            start = data.get("start_percent", DEFAULT_START_PERCENT)
            return {**data, "stop_percent": start}
        return data

    @field_validator("exclude")
    @classmethod
    def _validate_exclude(cls, v: str) -> str:
        """Reject patterns that do not compile."""
        try:
            re.compile(v)
        except re.error as e:
            msg = f"unparsable exclusion pattern {v!r}: {e}"
            raise ValueError(msg) from None
        return v

    @model_validator(mode="after")
    def _check_stop_not_below_start(self) -> Self:
        if self.stop_percent < self.start_percent:
            msg = (
                f"stop percent ({self.stop_percent}) must not be lower than "
                f"start percent ({self.start_percent})"
            )
            raise ValueError(msg)
        return self

    def exclude_pattern(self) -> re.Pattern[str]:
        """Return the compiled exclusion pattern."""
        return re.compile(self.exclude)


def _describe_validation_error(error: ValidationError) -> str:
    """Flatten a Pydantic error into a single readable line."""
    parts: list[str] = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        message = err["msg"].removeprefix("Value error, ")
        parts.append(f"{loc}: {message}" if loc else message)
    return "; ".join(parts)


def _read_config_file(path: Path) -> dict[str, Any]:
    """Load the raw TOML table from a config file."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise InvalidConfiguration(f"Invalid TOML syntax in {path}: {e}") from e
    except OSError as e:
        raise InvalidConfiguration(f"Failed to read config {path}: {e}") from e


def load_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ReapConfig:
    """Build the run configuration.

    Args:
        path: Explicit config file. It must exist. If None, the default
            config path is used when present and ignored otherwise.
        overrides: Values from the command line; None entries are ignored
            so that file values and defaults stay in effect.

    Returns:
        Validated ReapConfig.

    Raises:
        UsageError: If an explicit config file does not exist.
        InvalidConfiguration: If the file or the combined values are invalid.
    """
    data: dict[str, Any] = {}

    if path is not None:
        if not path.is_file():
            raise UsageError(f"Config file not found: {path}")
        data = _read_config_file(path)
    else:
        default_path = get_config_path()
        if default_path.is_file():
            logger.debug("Loading config from %s", default_path)
            data = _read_config_file(default_path)

    if overrides:
        data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ReapConfig.model_validate(data)
    except ValidationError as e:
        raise InvalidConfiguration(_describe_validation_error(e)) from e
