"""
WFScan Data Models

Two families of structures live here:

- The permissive node shape (plain dataclasses) that raw workflow JSON is
  projected onto. Every field is optional and wrong types degrade to
  "absent" instead of failing.
- The dependency manifest and availability report (pydantic v2 models),
  which are what the HTTP API, the CLI and the bucket collaborators
  exchange and persist.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Constants
# =============================================================================

# cnr_id of nodes that ship with ComfyUI itself
CORE_PACKAGE_ID = "comfy-core"

DEFAULT_NODE_VERSION = "latest"


class ModelCategory(str, Enum):
    """Fixed set of model categories a workflow can depend on."""
    CHECKPOINTS = "checkpoints"
    VAE = "vae"
    LORAS = "loras"
    UPSCALE_MODELS = "upscale_models"
    CONTROLNET = "controlnet"
    CLIP = "clip"
    CLIP_VISION = "clip_vision"
    TEXT_ENCODERS = "text_encoders"
    DIFFUSION_MODELS = "diffusion_models"
    EMBEDDING = "embedding"
    STYLE_MODELS = "style_models"
    HYPERNETWORKS = "hypernetworks"
    GLIGEN = "gligen"


MODEL_CATEGORIES: List[str] = [category.value for category in ModelCategory]

# Category -> folder under models/ in the bucket
CATEGORY_FOLDERS: Dict[str, str] = {
    category: category for category in MODEL_CATEGORIES
}
CATEGORY_FOLDERS[ModelCategory.EMBEDDING.value] = "embeddings"

CATEGORY_LABELS: Dict[str, str] = {
    "checkpoints": "Checkpoints",
    "vae": "VAE",
    "loras": "LoRAs",
    "upscale_models": "Upscale Models",
    "controlnet": "ControlNet",
    "clip": "CLIP",
    "clip_vision": "CLIP Vision",
    "text_encoders": "Text Encoders",
    "diffusion_models": "Diffusion Models",
    "embedding": "Embeddings",
    "style_models": "Style Models",
    "hypernetworks": "Hypernetworks",
    "gligen": "GLIGEN",
}


def scalar_text(value: Any) -> Optional[str]:
    """
    Render a loosely-typed JSON scalar as text.

    Returns None for absent values, empty strings and non-scalars
    (lists, dicts). Booleans render as JSON literals.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value if value != "" else None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return None


# =============================================================================
# Workflow Node Shape
# =============================================================================

@dataclass
class ModelReference:
    """Entry of a node's properties.models side channel."""
    directory: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional[ModelReference]:
        if not isinstance(data, dict):
            return None
        directory = data.get("directory")
        name = data.get("name")
        return cls(
            directory=directory if isinstance(directory, str) else None,
            name=name if isinstance(name, str) and name != "" else None,
        )


@dataclass
class NodeProperties:
    """The subset of a node's properties the scanner cares about."""
    cnr_id: Optional[str] = None
    ver: Optional[str] = None
    models: List[ModelReference] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> NodeProperties:
        if not isinstance(data, dict):
            return cls()

        cnr_id = data.get("cnr_id")
        raw_models = data.get("models")
        models: List[ModelReference] = []
        if isinstance(raw_models, list):
            for entry in raw_models:
                ref = ModelReference.from_dict(entry)
                if ref is not None:
                    models.append(ref)

        return cls(
            cnr_id=cnr_id if isinstance(cnr_id, str) and cnr_id != "" else None,
            ver=scalar_text(data.get("ver")),
            models=models,
        )


@dataclass
class WorkflowNode:
    """Parsed node from a ComfyUI workflow. All fields are optional."""
    type: Optional[str] = None
    widgets_values: List[Any] = field(default_factory=list)
    properties: NodeProperties = field(default_factory=NodeProperties)

    @classmethod
    def from_dict(cls, data: Any) -> Optional[WorkflowNode]:
        """Project raw node JSON; returns None when it is not an object."""
        if not isinstance(data, dict):
            return None

        node_type = data.get("type")
        widgets = data.get("widgets_values")
        return cls(
            type=node_type if isinstance(node_type, str) else None,
            widgets_values=list(widgets) if isinstance(widgets, list) else [],
            properties=NodeProperties.from_dict(data.get("properties")),
        )

    def widget_value(self, index: int) -> Optional[Any]:
        if 0 <= index < len(self.widgets_values):
            return self.widgets_values[index]
        return None


def parse_nodes(workflow: Any) -> List[WorkflowNode]:
    """Extract the node list of a workflow; anything malformed yields []."""
    if not isinstance(workflow, dict):
        return []
    raw_nodes = workflow.get("nodes")
    if not isinstance(raw_nodes, list):
        return []

    nodes = []
    for raw in raw_nodes:
        node = WorkflowNode.from_dict(raw)
        if node is not None:
            nodes.append(node)
    return nodes


# =============================================================================
# Manifest Models
# =============================================================================

class WorkflowModels(BaseModel):
    """Model files required by a workflow, one sorted list per category."""
    checkpoints: List[str] = Field(default_factory=list)
    vae: List[str] = Field(default_factory=list)
    loras: List[str] = Field(default_factory=list)
    upscale_models: List[str] = Field(default_factory=list)
    controlnet: List[str] = Field(default_factory=list)
    clip: List[str] = Field(default_factory=list)
    clip_vision: List[str] = Field(default_factory=list)
    text_encoders: List[str] = Field(default_factory=list)
    diffusion_models: List[str] = Field(default_factory=list)
    embedding: List[str] = Field(default_factory=list)
    style_models: List[str] = Field(default_factory=list)
    hypernetworks: List[str] = Field(default_factory=list)
    gligen: List[str] = Field(default_factory=list)

    def get(self, category: str) -> List[str]:
        if category not in MODEL_CATEGORIES:
            raise KeyError(category)
        return getattr(self, category)

    def iter_categories(self) -> Iterator[Tuple[str, List[str]]]:
        """Yield (category, models) in fixed category order."""
        for category in MODEL_CATEGORIES:
            yield category, getattr(self, category)


class CustomNode(BaseModel):
    """A custom node package required by the workflow."""
    node: str
    version: str = DEFAULT_NODE_VERSION

    @property
    def key(self) -> str:
        return custom_node_key(self.node, self.version)

    @property
    def remote_prefix(self) -> str:
        return f"custom-nodes/{self.node}/{self.version}/"


def custom_node_key(node: str, version: str) -> str:
    return f"{node}@{version}"


class ScanResult(BaseModel):
    """
    Dependency manifest of one workflow.

    Serialised as {"models": {...}, "custom-nodes": [...]} plus an
    optional caller-supplied "required_models" list.
    """
    model_config = ConfigDict(populate_by_name=True)

    models: WorkflowModels = Field(default_factory=WorkflowModels)
    custom_nodes: List[CustomNode] = Field(default_factory=list, alias="custom-nodes")
    required_models: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def with_required_models(self, names: Optional[List[str]]) -> ScanResult:
        """Copy of this manifest carrying the required_models list."""
        return self.model_copy(update={"required_models": list(names or [])})

    def is_empty(self) -> bool:
        return not self.custom_nodes and all(
            not models for _, models in self.models.iter_categories()
        )


class AvailabilityStatus(BaseModel):
    """
    Presence of each manifest entry in the bucket.

    A missing key means "unknown / not checked", never "missing".
    """
    model_config = ConfigDict(populate_by_name=True)

    custom_nodes: Dict[str, bool] = Field(default_factory=dict, alias="customNodes")
    models: Dict[str, Dict[str, bool]] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def model_available(self, category: str, name: str) -> Optional[bool]:
        return self.models.get(category, {}).get(name)

    def custom_node_available(self, node: CustomNode) -> Optional[bool]:
        return self.custom_nodes.get(node.key)
