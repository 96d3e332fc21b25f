"""
WFScan Workflows Module

Dependency extraction from ComfyUI workflow graphs.
"""

from .scanner import (
    CATEGORY_SOURCES,
    CategorySource,
    PropertySource,
    WidgetSource,
    WorkflowScanner,
    load_workflow_file,
    scan_workflow,
    scan_workflow_file,
)
from .summary import (
    CategoryCount,
    categories_with_models,
    missing_required_models,
    model_keys,
    required_model_names,
    total_model_count,
)

__all__ = [
    "CATEGORY_SOURCES",
    "CategorySource",
    "PropertySource",
    "WidgetSource",
    "WorkflowScanner",
    "load_workflow_file",
    "scan_workflow",
    "scan_workflow_file",
    "CategoryCount",
    "categories_with_models",
    "missing_required_models",
    "model_keys",
    "required_model_names",
    "total_model_count",
]
