"""
WFScan Configuration Module

Central configuration for the scanner, the storage bucket collaborators
and the provisioning trigger. Values come from environment variables and
an optional JSON file at ~/.wfscan/config.json.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _default_home() -> Path:
    return Path(os.environ.get("WFSCAN_HOME", Path.home() / ".wfscan")).expanduser()


@dataclass
class StorageConfig:
    """S3-compatible bucket configuration (Scaleway object storage)."""
    region: str = field(
        default_factory=lambda: os.environ.get("SCALEWAY_REGION") or "fr-par"
    )
    access_key_id: Optional[str] = field(
        default_factory=lambda: os.environ.get("SCALEWAY_ACCESS_KEY_ID")
    )
    secret_access_key: Optional[str] = field(
        default_factory=lambda: os.environ.get("SCALEWAY_SECRET_ACCESS_KEY")
    )
    bucket_name: str = field(
        default_factory=lambda: os.environ.get("SCALEWAY_BUCKET_NAME") or "konama-storage"
    )
    custom_endpoint_url: Optional[str] = field(
        default_factory=lambda: os.environ.get("SCALEWAY_ENDPOINT_URL")
    )

    # Parallel existence lookups
    max_workers: int = 16

    @property
    def endpoint_url(self) -> str:
        if self.custom_endpoint_url:
            return self.custom_endpoint_url
        return f"https://s3.{self.region}.scw.cloud"


@dataclass
class ProvisioningConfig:
    """External provisioning script configuration."""
    script_path: Path = field(
        default_factory=lambda: Path(
            os.environ.get("WFSCAN_PROVISIONER_SCRIPT", "wf-resources-downloader.sh")
        ).expanduser()
    )
    interpreter: str = "bash"


@dataclass
class APIConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class WFScanConfig:
    """Main configuration container."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    provisioning: ProvisioningConfig = field(default_factory=ProvisioningConfig)
    api: APIConfig = field(default_factory=APIConfig)

    data_path: Path = field(default_factory=_default_home)

    @property
    def config_file(self) -> Path:
        return self.data_path / "config.json"

    def save(self) -> None:
        """Save configuration to file. Secrets are never written."""
        self.data_path.mkdir(parents=True, exist_ok=True)
        config_dict = {
            "storage": {
                "region": self.storage.region,
                "bucket_name": self.storage.bucket_name,
                "endpoint_url": self.storage.custom_endpoint_url,
                "max_workers": self.storage.max_workers,
            },
            "provisioning": {
                "script_path": str(self.provisioning.script_path),
                "interpreter": self.provisioning.interpreter,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
            },
        }
        with open(self.config_file, "w") as f:
            json.dump(config_dict, f, indent=2)

    @classmethod
    def load(cls) -> "WFScanConfig":
        """Load configuration from file or fall back to defaults."""
        config = cls()
        if not config.config_file.exists():
            return config

        try:
            with open(config.config_file) as f:
                data = json.load(f)

            if "storage" in data:
                storage_data = data["storage"]
                # Environment wins over the file for region and bucket
                if storage_data.get("region") and not os.environ.get("SCALEWAY_REGION"):
                    config.storage.region = storage_data["region"]
                if storage_data.get("bucket_name") and not os.environ.get("SCALEWAY_BUCKET_NAME"):
                    config.storage.bucket_name = storage_data["bucket_name"]
                if storage_data.get("endpoint_url") and not config.storage.custom_endpoint_url:
                    config.storage.custom_endpoint_url = storage_data["endpoint_url"]
                config.storage.max_workers = storage_data.get("max_workers", 16)

            if "provisioning" in data:
                prov_data = data["provisioning"]
                if prov_data.get("script_path") and not os.environ.get("WFSCAN_PROVISIONER_SCRIPT"):
                    config.provisioning.script_path = Path(prov_data["script_path"]).expanduser()
                config.provisioning.interpreter = prov_data.get("interpreter", "bash")

            if "api" in data:
                config.api.host = data["api"].get("host", "127.0.0.1")
                config.api.port = data["api"].get("port", 8000)
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Could not load config, using defaults: {e}")
            config = cls()

        return config


# Global configuration instance
_config: Optional[WFScanConfig] = None


def get_config() -> WFScanConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = WFScanConfig.load()
    return _config


def reset_config() -> None:
    """Reset global configuration (useful for testing)."""
    global _config
    _config = None


def configure_logging() -> None:
    """
    Configure root logging for entry points.

    Level comes from WFSCAN_LOG_LEVEL (default INFO).
    """
    logging.basicConfig(
        level=getattr(logging, os.environ.get("WFSCAN_LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
