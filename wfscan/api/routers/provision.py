"""
Provisioning Router

Runs the provisioning script for an uploaded workflow and streams its
output as Server-Sent Events.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from ...provisioning.runner import ProvisioningRunner
from ..dependencies import get_provisioning_runner

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def run_downloader(
    workflow_name: Optional[str] = Query(default=None, alias="workflowName"),
    overwrite: bool = False,
    comfyui_version: Optional[str] = Query(default=None, alias="comfyuiVersion"),
    runner: ProvisioningRunner = Depends(get_provisioning_runner),
):
    if not workflow_name:
        raise HTTPException(status_code=400, detail="Missing workflowName")

    async def generate_sse():
        async for event in runner.stream(workflow_name, overwrite, comfyui_version):
            yield event.to_sse()

    return StreamingResponse(
        generate_sse(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
