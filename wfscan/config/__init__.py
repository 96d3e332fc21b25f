"""Configuration module for WFScan."""

from .settings import (
    get_config,
    reset_config,
    configure_logging,
    WFScanConfig,
    StorageConfig,
    ProvisioningConfig,
    APIConfig,
)

__all__ = [
    "get_config",
    "reset_config",
    "configure_logging",
    "WFScanConfig",
    "StorageConfig",
    "ProvisioningConfig",
    "APIConfig",
]
