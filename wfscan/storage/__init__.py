"""
WFScan Storage Module

Object storage collaborators: availability checks and uploads.
"""

from .availability import AvailabilityChecker
from .bucket import (
    SCAN_RESULT_FILENAME,
    create_s3_client,
    custom_node_marker_key,
    model_object_key,
    object_exists,
    workflow_object_key,
    workflow_prefix,
)
from .factory import create_availability_checker, create_uploader
from .uploader import UploadResult, WorkflowUploader

__all__ = [
    "AvailabilityChecker",
    "create_availability_checker",
    "create_uploader",
    "SCAN_RESULT_FILENAME",
    "create_s3_client",
    "custom_node_marker_key",
    "model_object_key",
    "object_exists",
    "workflow_object_key",
    "workflow_prefix",
    "UploadResult",
    "WorkflowUploader",
]
