"""
Upload Router

Persist a workflow and its scan result to workflows/{outputName}/.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ...core.errors import StorageError, WorkflowExistsError
from ...core.models import ScanResult
from ...storage.uploader import WorkflowUploader
from ..dependencies import get_uploader

logger = logging.getLogger(__name__)

router = APIRouter()


class UploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    output_name: Optional[str] = Field(default=None, alias="outputName")
    scan_result: Optional[ScanResult] = Field(default=None, alias="scanResult")
    workflow_data: Optional[Any] = Field(default=None, alias="workflowData")
    workflow_file_name: Optional[str] = Field(default=None, alias="workflowFileName")
    required_models: Optional[List[str]] = Field(default=None, alias="requiredModels")


@router.post("")
def upload(
    request: UploadRequest,
    uploader: WorkflowUploader = Depends(get_uploader),
):
    """Upload workflow JSON and scan result (with required_models)."""
    if (
        not (request.output_name or "").strip()
        or request.scan_result is None
        or not request.workflow_data
        or not request.workflow_file_name
    ):
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        result = uploader.upload(
            output_name=request.output_name,
            scan_result=request.scan_result,
            workflow_data=request.workflow_data,
            workflow_file_name=request.workflow_file_name,
            required_models=request.required_models,
        )
    except WorkflowExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        logger.error(f"[Upload] {e}")
        raise HTTPException(status_code=500, detail=f"Failed to upload: {e}")

    return {
        "success": True,
        "message": "Files uploaded successfully",
        "location": result.location,
        "files": result.files,
    }
