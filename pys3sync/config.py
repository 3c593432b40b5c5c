"""Configuration management for pys3sync.

Settings are resolved from (highest precedence first) command line options,
environment variables and the config file ``~/.config/pys3sync/config``.
The config file uses simple ``KEY=value`` lines::

    PYS3SYNC_BUCKET=my-backup-bucket
    PYS3SYNC_REGION=eu-central-1
    PYS3SYNC_DEST=/intern
"""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "PYS3SYNC_CONFIG_DIR"
CONFIG_FILE_NAME = "config"

# Setting name -> environment variables checked in order
ENV_VARS: dict[str, tuple[str, ...]] = {
    "bucket": ("PYS3SYNC_BUCKET",),
    "region": ("PYS3SYNC_REGION", "AWS_REGION", "AWS_DEFAULT_REGION"),
    "src": ("PYS3SYNC_SRC",),
    "dest": ("PYS3SYNC_DEST",),
}


class Config:
    """Resolves pys3sync settings from the environment and config file."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file
                (defaults to $PYS3SYNC_CONFIG_DIR or ~/.config/pys3sync)
        """
        if config_dir is None:
            env_dir = os.environ.get(CONFIG_DIR_ENV)
            config_dir = (
                Path(env_dir) if env_dir else Path.home() / ".config" / "pys3sync"
            )
        self.config_dir = config_dir
        self._file_values: Optional[dict[str, str]] = None

    def get_config_path(self) -> Path:
        """Return the path of the config file."""
        return self.config_dir / CONFIG_FILE_NAME

    def _load_file(self) -> dict[str, str]:
        """Read ``KEY=value`` pairs from the config file (cached)."""
        if self._file_values is not None:
            return self._file_values

        values: dict[str, str] = {}
        path = self.get_config_path()
        if path.exists():
            try:
                for line in path.read_text(encoding="utf-8").splitlines():
                    line = line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    key, value = line.split("=", 1)
                    values[key.strip()] = value.strip().strip('"').strip("'")
            except OSError as e:
                logger.warning("Could not read config file %s: %s", path, e)
        self._file_values = values
        return values

    def get(self, name: str) -> Optional[str]:
        """Get a setting from the environment, falling back to the config file.

        Args:
            name: Setting name (bucket, region, src or dest)

        Returns:
            The configured value or None
        """
        env_names = ENV_VARS.get(name, ())
        for env_name in env_names:
            value = os.environ.get(env_name)
            if value:
                return value

        file_values = self._load_file()
        for env_name in env_names:
            value = file_values.get(env_name)
            if value:
                return value
        return None

    def resolve(self, name: str, value: Optional[str]) -> Optional[str]:
        """Return ``value`` if given on the command line, else the configured one."""
        if value is not None and value != "":
            return value
        return self.get(name)

    @property
    def bucket(self) -> Optional[str]:
        return self.get("bucket")

    @property
    def region(self) -> Optional[str]:
        return self.get("region")

    @property
    def src(self) -> Optional[str]:
        return self.get("src")

    @property
    def dest(self) -> str:
        return self.get("dest") or ""

    def save(self, values: dict[str, str]) -> Path:
        """Merge settings into the config file.

        Args:
            values: Mapping of setting name (bucket, region, src, dest) to value

        Returns:
            Path of the written config file
        """
        current = dict(self._load_file())
        for name, value in values.items():
            current[ENV_VARS[name][0]] = value

        self.config_dir.mkdir(parents=True, exist_ok=True)
        path = self.get_config_path()
        path.write_text(
            "".join(f"{key}={value}\n" for key, value in sorted(current.items())),
            encoding="utf-8",
        )
        self._file_values = current
        return path


config = Config()
