"""
Availability Router

Check which custom nodes and models of a scan result are already in the
bucket.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ...core.models import ScanResult
from ...storage.availability import AvailabilityChecker
from ..dependencies import get_availability_checker

logger = logging.getLogger(__name__)

router = APIRouter()


class AvailabilityRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scan_result: Optional[ScanResult] = Field(default=None, alias="scanResult")


@router.post("")
def check_availability(
    request: AvailabilityRequest,
    checker: AvailabilityChecker = Depends(get_availability_checker),
):
    """Return per-entry presence, keyed like the manifest."""
    if request.scan_result is None:
        raise HTTPException(status_code=400, detail="Missing scan result")

    availability = checker.check(request.scan_result)
    return {"success": True, "availability": availability.to_dict()}
