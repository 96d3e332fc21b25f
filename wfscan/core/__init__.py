"""WFScan core: node shape, manifest models and errors."""

from .errors import (
    WFScanError,
    WorkflowFileError,
    StorageError,
    WorkflowExistsError,
    ProvisioningError,
)
from .models import (
    CORE_PACKAGE_ID,
    DEFAULT_NODE_VERSION,
    MODEL_CATEGORIES,
    CATEGORY_FOLDERS,
    CATEGORY_LABELS,
    ModelCategory,
    ModelReference,
    NodeProperties,
    WorkflowNode,
    WorkflowModels,
    CustomNode,
    ScanResult,
    AvailabilityStatus,
    custom_node_key,
    parse_nodes,
    scalar_text,
)

__all__ = [
    "WFScanError",
    "WorkflowFileError",
    "StorageError",
    "WorkflowExistsError",
    "ProvisioningError",
    "CORE_PACKAGE_ID",
    "DEFAULT_NODE_VERSION",
    "MODEL_CATEGORIES",
    "CATEGORY_FOLDERS",
    "CATEGORY_LABELS",
    "ModelCategory",
    "ModelReference",
    "NodeProperties",
    "WorkflowNode",
    "WorkflowModels",
    "CustomNode",
    "ScanResult",
    "AvailabilityStatus",
    "custom_node_key",
    "parse_nodes",
    "scalar_text",
]
