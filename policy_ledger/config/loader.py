"""
YAML configuration loader for the policy ledger.

Loads configuration from YAML files with environment variable substitution.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from policy_ledger.config.models import LedgerConfig
from policy_ledger.config.validation import ConfigurationError


DEFAULT_CONFIG_PATHS = [
    Path("config/ledger.yaml"),
    Path("ledger.yaml"),
    Path.home() / ".policy_ledger" / "ledger.yaml",
]

# ${NAME} or ${NAME:-fallback}
ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<fallback>[^}]*))?\}")


def expand_env_references(node: Any) -> Any:
    """
    Expand environment references in every string of a parsed YAML tree.

    An unset variable without a fallback expands to the empty string.
    """
    if isinstance(node, str):
        return ENV_REFERENCE.sub(
            lambda m: os.environ.get(m["name"], m["fallback"] or ""),
            node,
        )
    if isinstance(node, dict):
        return {key: expand_env_references(item) for key, item in node.items()}
    if isinstance(node, list):
        return [expand_env_references(item) for item in node]
    return node


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Read a ledger configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        Top-level mapping with environment references expanded (empty for an
        empty file)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the file is not YAML or its top level is not
            a mapping
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{path} is not valid YAML: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(
            f"{path} must contain a mapping, got {type(document).__name__}"
        )

    return expand_env_references(document)


def find_config_file() -> Path | None:
    """First existing file among DEFAULT_CONFIG_PATHS, if any."""
    return next((path for path in DEFAULT_CONFIG_PATHS if path.exists()), None)


def load_config(
    config_path: str | Path | None = None,
    store_path: str | Path | None = None,
) -> LedgerConfig:
    """
    Load ledger configuration.

    Every setting has a default, so when no path is given and none of the
    default locations exist the built-in defaults are used.

    Args:
        config_path: Path to configuration YAML file. If None, looks in
                    DEFAULT_CONFIG_PATHS.
        store_path: Ledger file to use instead of ``storage.path``

    Returns:
        Validated LedgerConfig object

    Raises:
        FileNotFoundError: If an explicit configuration path does not exist
        ConfigurationError: If the file cannot be parsed
        ValidationError: If configuration is invalid
    """
    path = Path(config_path) if config_path is not None else find_config_file()
    settings = read_config_file(path) if path is not None else {}

    if store_path is not None:
        storage = dict(settings.get("storage") or {})
        storage["path"] = str(store_path)
        settings["storage"] = storage

    return LedgerConfig(**settings)
