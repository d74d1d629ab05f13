"""
Runtime Configuration

Central configuration for tree construction and logging.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from whitelist_core.crypto.hashing import DEFAULT_ALGORITHM, SUPPORTED_ALGORITHMS, Hasher
from whitelist_core.merkle.merkle_tree import MerkleTree, OddLayerPolicy
from whitelist_core.schemas.errors import ConfigException

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "WHITELIST_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class TreeConfig:
    """Parameters that define a tree's identity."""
    hash_algorithm: str = DEFAULT_ALGORITHM
    odd_policy: str = OddLayerPolicy.DUPLICATE.value

    def __post_init__(self):
        if self.hash_algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigException(
                f"Unsupported hash algorithm: {self.hash_algorithm!r}",
                field_path="tree.hash_algorithm",
                details={"supported": list(SUPPORTED_ALGORITHMS)},
            )
        try:
            OddLayerPolicy(self.odd_policy)
        except ValueError as e:
            raise ConfigException(
                f"Unknown odd-layer policy: {self.odd_policy!r}",
                field_path="tree.odd_policy",
                details={"supported": [p.value for p in OddLayerPolicy]},
            ) from e

    def make_hasher(self) -> Hasher:
        return Hasher(self.hash_algorithm)

    def make_tree(self) -> MerkleTree:
        """Return a fresh, unbuilt tree with these parameters."""
        return MerkleTree(hasher=self.make_hasher(), odd_policy=self.odd_policy)


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "INFO"
    file: Optional[str] = None

    def __post_init__(self):
        if self.level is None:
            self.level = "INFO"
        if not isinstance(self.level, str):
            raise ConfigException(
                f"Log level must be a string, got {type(self.level).__name__}",
                field_path="logging.level",
            )
        self.level = self.level.upper()
        if self.level not in _LOG_LEVELS:
            raise ConfigException(
                f"Unknown log level: {self.level!r}",
                field_path="logging.level",
            )


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (and a .env file)
    - YAML or JSON file
    - Programmatic construction
    """
    tree: TreeConfig = field(default_factory=TreeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - WHITELIST_HASH_ALGORITHM: Digest algorithm (sha256, sha3_256, ...)
        - WHITELIST_ODD_POLICY: duplicate or promote
        - WHITELIST_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR
        - WHITELIST_LOG_FILE: Also write logs to this file
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            overrides.setdefault("tree", {})["hash_algorithm"] = os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM")
        if os.getenv(f"{ENV_PREFIX}ODD_POLICY"):
            overrides.setdefault("tree", {})["odd_policy"] = os.getenv(f"{ENV_PREFIX}ODD_POLICY")

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigException(f"Invalid YAML in {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_json(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigException(f"Invalid JSON in {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load from YAML (.yaml/.yml) or JSON (anything else)."""
        path = Path(path)
        if path.suffix.lower() in (".yaml", ".yml"):
            return cls.from_yaml(path)
        return cls.from_json(path)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        if not isinstance(data, dict):
            raise ConfigException(f"Configuration must be a mapping, got {type(data).__name__}")

        tree_data = data.get("tree", {}) or {}
        logging_data = data.get("logging", {}) or {}

        try:
            tree = TreeConfig(**tree_data)
            log = LoggingConfig(**logging_data)
        except TypeError as e:
            raise ConfigException(f"Invalid configuration: {e}") from e

        return cls(
            tree=tree,
            logging=log,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        data = self.to_dict()
        for section, values in overrides.items():
            data.setdefault(section, {}).update(values)
        return self.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# Default config locations, checked in order
DEFAULT_CONFIG_PATHS: tuple[str, ...] = (
    "whitelist.yaml",
    "whitelist.yml",
    "whitelist.json",
)


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings. When no path is given
    the current directory is searched for DEFAULT_CONFIG_PATHS.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = RuntimeConfig.from_file(config_path)
    else:
        for name in DEFAULT_CONFIG_PATHS:
            candidate = Path.cwd() / name
            if candidate.exists():
                config = RuntimeConfig.from_file(candidate)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file (YAML)."""
    return f"""# Merkle whitelist configuration
tree:
  # One of: {", ".join(SUPPORTED_ALGORITHMS)}
  hash_algorithm: {DEFAULT_ALGORITHM}
  # duplicate: pair an unpaired last node with itself
  # promote:   carry it to the next layer unchanged
  odd_policy: {OddLayerPolicy.DUPLICATE.value}

logging:
  level: INFO
  file: null
"""
