"""
Workflow Uploader

Persists a workflow and its scan result under workflows/{name}/ in the
bucket. The stored scan result is what the provisioning process reads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from ..core.errors import StorageError, WorkflowExistsError
from ..core.models import ScanResult
from .bucket import (
    SCAN_RESULT_FILENAME,
    get_json,
    prefix_has_objects,
    put_json,
    workflow_object_key,
    workflow_prefix,
)

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    location: str
    files: List[str] = field(default_factory=list)


class WorkflowUploader:
    """Uploads workflows and scan results to the bucket."""

    def __init__(self, client: Any, bucket: str):
        self.client = client
        self.bucket = bucket

    def workflow_exists(self, output_name: str) -> bool:
        """
        True when workflows/{output_name}/ already holds objects.

        A failed listing is logged and reported as not existing.
        """
        try:
            return prefix_has_objects(self.client, self.bucket, workflow_prefix(output_name))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"[Uploader] Error checking folder existence: {e}")
            return False

    def upload(
        self,
        output_name: str,
        scan_result: ScanResult,
        workflow_data: Any,
        workflow_file_name: str,
        required_models: Optional[List[str]] = None,
    ) -> UploadResult:
        """
        Upload the workflow JSON and its scan result.

        Raises:
            ValueError: Empty output name or file name
            WorkflowExistsError: The target folder is already in use
            StorageError: An upload failed
        """
        output_name = (output_name or "").strip()
        if not output_name:
            raise ValueError("Output name is required")
        if not workflow_file_name:
            raise ValueError("Workflow file name is required")

        if self.workflow_exists(output_name):
            raise WorkflowExistsError(
                f"Workflow folder already exists: {workflow_prefix(output_name)}. "
                "Use a different name or delete the existing folder first."
            )

        stored_result = scan_result.with_required_models(required_models)

        workflow_key = workflow_object_key(output_name, workflow_file_name)
        scan_result_key = workflow_object_key(output_name, SCAN_RESULT_FILENAME)

        logger.info(f"[Uploader] Uploading {workflow_key}")
        put_json(self.client, self.bucket, workflow_key, workflow_data)
        logger.info(f"[Uploader] Uploading {scan_result_key}")
        put_json(self.client, self.bucket, scan_result_key, stored_result.to_dict())

        return UploadResult(
            location=f"s3://{self.bucket}/{workflow_prefix(output_name)}",
            files=[workflow_key, scan_result_key],
        )

    def load_scan_result(self, output_name: str) -> ScanResult:
        """Read back the scan result stored for a workflow."""
        key = workflow_object_key(output_name, SCAN_RESULT_FILENAME)
        data = get_json(self.client, self.bucket, key)
        try:
            return ScanResult.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Malformed scan result in {key}: {e}") from e
