"""
Check configuration.

Configuration can be provided directly, from environment variables, or
from a YAML settings file.

Environment Variables:
    MERGED_BLOCKS_STORE_URL: Store URL or local path
    MERGED_BLOCKS_RANGE: Block range expression (default: "0:")
    MERGED_BLOCKS_BUNDLE_SIZE: Blocks per bundle (default: 100)
    MERGED_BLOCKS_PRINT: Print details: none, stats or full (default: none)
    MERGED_BLOCKS_FIRST_STREAMABLE_BLOCK: First streamable block (default: 0)
    MERGED_BLOCKS_PROGRESS_INTERVAL: Bundles between progress lines (default: 10000)
    MERGED_BLOCKS_KEY_WIDTH: Digits in bundle keys (default: 10)
    MERGED_BLOCKS_DATA_DIR: Value substituted for {data-dir} (default: ".")

YAML file (``check`` section):

```yaml
check:
  store_url: "file://{data-dir}/storage/merged-blocks"
  range: "0:1000000"
  bundle_size: 100
  print: stats
  first_streamable_block: 1
```
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .check.modes import PrintDetails
from .exceptions import ConfigError
from .ranges import DEFAULT_KEY_WIDTH, BlockRange


def replace_data_dir(data_dir: str, value: str) -> str:
    """Replace ``{data-dir}`` in ``value`` with the absolute ``data_dir``.

    The legacy ``{sf-data-dir}`` placeholder is replaced as well.
    """
    absolute = str(Path(data_dir).absolute())
    value = value.replace("{data-dir}", absolute)
    return value.replace("{sf-data-dir}", absolute)


def _parse_int(field: str, value: Any, minimum: int = 0) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(field, "must be an integer", str(value)) from None
    if number < minimum:
        raise ConfigError(field, f"must be >= {minimum}", str(value))
    return number


@dataclass
class CheckConfig:
    """Configuration for one merged blocks check.

    Attributes:
        store_url: Store URL (``file://...``, ``memory://``) or local path;
            may contain ``{data-dir}``
        block_range: Range to check
        bundle_size: Blocks per bundle
        print_details: Per-block work: none, stats or full
        first_streamable_block: Lowest block the archive is expected to hold
        progress_interval: Bundles between progress coverage lines
        key_width: Digits in bundle keys
        data_dir: Directory substituted for ``{data-dir}``
    """

    store_url: str
    block_range: BlockRange
    bundle_size: int = 100
    print_details: PrintDetails = PrintDetails.NONE
    first_streamable_block: int = 0
    progress_interval: int = 10_000
    key_width: int = DEFAULT_KEY_WIDTH
    data_dir: str = "."

    def __post_init__(self) -> None:
        if not self.store_url:
            raise ConfigError("store_url", "is required")
        self.bundle_size = _parse_int("bundle_size", self.bundle_size, minimum=1)
        self.progress_interval = _parse_int("progress_interval", self.progress_interval, minimum=1)
        self.key_width = _parse_int("key_width", self.key_width, minimum=1)
        self.first_streamable_block = _parse_int(
            "first_streamable_block", self.first_streamable_block
        )
        try:
            self.print_details = PrintDetails.parse(self.print_details)
        except ValueError as e:
            raise ConfigError("print_details", str(e), str(self.print_details)) from None

    def resolved_store_url(self) -> str:
        return replace_data_dir(self.data_dir, self.store_url)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckConfig:
        """Create configuration from a mapping (YAML ``check`` section layout)."""
        range_value = data.get("range", "0:")
        if isinstance(range_value, BlockRange):
            block_range = range_value
        else:
            block_range = BlockRange.parse(str(range_value))
        return cls(
            store_url=data.get("store_url", ""),
            block_range=block_range,
            bundle_size=data.get("bundle_size", 100),
            print_details=data.get("print", PrintDetails.NONE),
            first_streamable_block=data.get("first_streamable_block", 0),
            progress_interval=data.get("progress_interval", 10_000),
            key_width=data.get("key_width", DEFAULT_KEY_WIDTH),
            data_dir=data.get("data_dir", "."),
        )

    @classmethod
    def from_environment(cls, **overrides: Any) -> CheckConfig:
        """Create configuration from ``MERGED_BLOCKS_*`` environment variables.

        Args:
            overrides: Values taking precedence over the environment
                (same keys as ``from_dict``)
        """
        data: dict[str, Any] = {
            "store_url": os.environ.get("MERGED_BLOCKS_STORE_URL", ""),
            "range": os.environ.get("MERGED_BLOCKS_RANGE", "0:"),
            "bundle_size": os.environ.get("MERGED_BLOCKS_BUNDLE_SIZE", 100),
            "print": os.environ.get("MERGED_BLOCKS_PRINT", "none"),
            "first_streamable_block": os.environ.get("MERGED_BLOCKS_FIRST_STREAMABLE_BLOCK", 0),
            "progress_interval": os.environ.get("MERGED_BLOCKS_PROGRESS_INTERVAL", 10_000),
            "key_width": os.environ.get("MERGED_BLOCKS_KEY_WIDTH", DEFAULT_KEY_WIDTH),
            "data_dir": os.environ.get("MERGED_BLOCKS_DATA_DIR", "."),
        }
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, path: Path, **overrides: Any) -> CheckConfig:
        """Create configuration from the ``check`` section of a YAML file.

        Raises:
            ConfigError: If the file cannot be read or is not a mapping
        """
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError("config_file", f"cannot read: {e}", str(path)) from e
        except yaml.YAMLError as e:
            raise ConfigError("config_file", f"invalid YAML: {e}", str(path)) from e

        section = loaded.get("check", loaded) if isinstance(loaded, dict) else None
        if not isinstance(section, dict):
            raise ConfigError("config_file", "expected a mapping", str(path))

        data = dict(section)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(data)
