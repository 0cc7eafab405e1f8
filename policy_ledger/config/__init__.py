"""
Configuration module for the policy ledger.

This module provides:
- Pydantic configuration models
- YAML configuration loading
- Configuration validation
"""

from policy_ledger.config.models import (
    LedgerConfig,
    PolicyRulesConfig,
    StorageConfig,
    default_packages,
)
from policy_ledger.config.loader import load_config
from policy_ledger.config.validation import ConfigurationError, validate_config

__all__ = [
    "LedgerConfig",
    "PolicyRulesConfig",
    "StorageConfig",
    "default_packages",
    "load_config",
    "ConfigurationError",
    "validate_config",
]
