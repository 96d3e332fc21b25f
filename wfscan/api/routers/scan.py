"""
Scan Router

POST a ComfyUI workflow JSON, get its dependency manifest back.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from ...workflows.scanner import scan_workflow
from ...workflows.summary import categories_with_models, total_model_count

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def scan(request: Request):
    """Scan the posted workflow and return its manifest with a summary."""
    try:
        workflow = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body is not valid JSON")

    result = scan_workflow(workflow)
    logger.info(
        f"[Scan] {total_model_count(result.models)} model(s), "
        f"{len(result.custom_nodes)} custom node(s)"
    )
    return {
        "scanResult": result.to_dict(),
        "summary": {
            "totalModels": total_model_count(result.models),
            "customNodes": len(result.custom_nodes),
            "categories": [
                {"category": item.category, "count": item.count}
                for item in categories_with_models(result.models)
            ],
        },
    }
