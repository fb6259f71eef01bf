"""
dimmatrix Config - Global configuration

Provides property-based configuration for storage and checking behavior.
Defaults can be seeded from environment variables:

    DIMMATRIX_VERIFIED=1          -> build matrices on verified storage
    DIMMATRIX_NO_BOUNDS_CHECK=1   -> skip element_at bounds checks
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes')


# =============================================================================
# Configuration Classes
# =============================================================================

@dataclass
class StorageConfig:
    """Configuration for element storage."""
    verified: bool = field(default_factory=lambda: _env_flag('DIMMATRIX_VERIFIED'))


@dataclass
class CheckConfig:
    """Configuration for run-time argument checks."""
    bounds: bool = field(default_factory=lambda: not _env_flag('DIMMATRIX_NO_BOUNDS_CHECK'))


# =============================================================================
# Global Configuration Manager
# =============================================================================

class MatrixConfig:
    """
    Global configuration manager for dimmatrix.

    Configuration can be set globally or overridden per thread within a
    context.

    Example:
        # Global configuration
        dimmatrix.config.storage = StorageConfig(verified=True)

        # Local configuration (context manager)
        with dimmatrix.config.local(checks=CheckConfig(bounds=False)):
            value = m.element_at(0, 0)
    """

    def __init__(self):
        self._global_storage = StorageConfig()
        self._global_checks = CheckConfig()

        # Thread-local storage for context overrides
        self._local = threading.local()

        self._callbacks: Dict[str, List[Callable]] = {
            "storage": [],
            "checks": [],
        }

    # -------------------------------------------------------------------------
    # Property Accessors (with thread-local override support)
    # -------------------------------------------------------------------------

    @property
    def storage(self) -> StorageConfig:
        """Get storage configuration."""
        if getattr(self._local, "storage", None) is not None:
            return self._local.storage
        return self._global_storage

    @storage.setter
    def storage(self, value: StorageConfig):
        """Set global storage configuration."""
        self._global_storage = value
        self._notify("storage", value)

    @property
    def checks(self) -> CheckConfig:
        """Get check configuration."""
        if getattr(self._local, "checks", None) is not None:
            return self._local.checks
        return self._global_checks

    @checks.setter
    def checks(self, value: CheckConfig):
        """Set global check configuration."""
        self._global_checks = value
        self._notify("checks", value)

    # -------------------------------------------------------------------------
    # Convenience Properties
    # -------------------------------------------------------------------------

    @property
    def verified(self) -> bool:
        """Whether new matrices use verified storage by default."""
        return self.storage.verified

    @verified.setter
    def verified(self, value: bool):
        self._global_storage.verified = value

    @property
    def bounds_check(self) -> bool:
        """Whether element_at validates its indices."""
        return self.checks.bounds

    @bounds_check.setter
    def bounds_check(self, value: bool):
        self._global_checks.bounds = value

    # -------------------------------------------------------------------------
    # Context Manager Support
    # -------------------------------------------------------------------------

    def local(self, **kwargs) -> "_LocalConfigContext":
        """
        Create a local configuration context.

        Args:
            **kwargs: Configuration overrides (storage, checks)

        Returns:
            Context manager
        """
        unknown = set(kwargs) - set(self._callbacks)
        if unknown:
            raise TypeError(f"Unknown configuration sections: {sorted(unknown)}")
        return _LocalConfigContext(self, **kwargs)

    def _set_local(self, **kwargs):
        for key, value in kwargs.items():
            if value is not None:
                setattr(self._local, key, value)

    def _clear_local(self, keys: List[str]):
        for key in keys:
            if hasattr(self._local, key):
                setattr(self._local, key, None)

    # -------------------------------------------------------------------------
    # Callback Registration
    # -------------------------------------------------------------------------

    def on_change(self, config_name: str, callback: Callable):
        """
        Register callback for configuration changes.

        Args:
            config_name: Name of config ("storage" or "checks")
            callback: Function to call with the new value
        """
        if config_name not in self._callbacks:
            raise KeyError(f"Unknown configuration section: {config_name}")
        self._callbacks[config_name].append(callback)

    def _notify(self, config_name: str, value: Any):
        for callback in self._callbacks.get(config_name, []):
            callback(value)

    # -------------------------------------------------------------------------
    # Reset / Serialization
    # -------------------------------------------------------------------------

    def reset(self):
        """Reset all configurations to defaults."""
        self._global_storage = StorageConfig()
        self._global_checks = CheckConfig()

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "storage": {
                "verified": self.storage.verified,
            },
            "checks": {
                "bounds": self.checks.bounds,
            },
        }

    def __repr__(self) -> str:
        return f"MatrixConfig({self.to_dict()})"


class _LocalConfigContext:
    """Context manager for local configuration override."""

    def __init__(self, config: MatrixConfig, **kwargs):
        self._config = config
        self._kwargs = kwargs
        self._keys = list(kwargs.keys())

    def __enter__(self):
        self._config._set_local(**self._kwargs)
        return self._config

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._config._clear_local(self._keys)
        return False


# =============================================================================
# Global Instance
# =============================================================================

config = MatrixConfig()


def get_config() -> MatrixConfig:
    """Get the global configuration instance."""
    return config


def set_verified(enabled: bool = True):
    """Enable or disable verified storage for newly built matrices."""
    config.storage = StorageConfig(verified=enabled)


def set_bounds_check(enabled: bool = True):
    """Enable or disable element_at bounds checking."""
    config.checks = CheckConfig(bounds=enabled)


__all__ = [
    "StorageConfig",
    "CheckConfig",
    "MatrixConfig",
    "config",
    "get_config",
    "set_verified",
    "set_bounds_check",
]
