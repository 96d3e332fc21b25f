"""Bucket collaborators built from the global configuration."""

from typing import Optional

from ..config.settings import StorageConfig, get_config
from .availability import AvailabilityChecker
from .bucket import create_s3_client
from .uploader import WorkflowUploader


def create_availability_checker(storage: Optional[StorageConfig] = None) -> AvailabilityChecker:
    storage = storage or get_config().storage
    return AvailabilityChecker(
        create_s3_client(storage),
        storage.bucket_name,
        max_workers=storage.max_workers,
    )


def create_uploader(storage: Optional[StorageConfig] = None) -> WorkflowUploader:
    storage = storage or get_config().storage
    return WorkflowUploader(create_s3_client(storage), storage.bucket_name)
