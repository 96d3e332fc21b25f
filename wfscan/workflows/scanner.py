"""
Workflow Scanner

Analyzes ComfyUI workflow JSON to extract its external dependencies:
- Model files, grouped into thirteen fixed categories
- Custom node packages (ComfyUI Node Registry id + version)

Loader nodes reference model files in two ways. Most put the filename in
widgets_values at a fixed index; some newer nodes also list it under
properties.models with an explicit directory. Several historical type
names exist for the same loader. CATEGORY_SOURCES declares, per category,
which node types and encodings contribute to it.

Scanning never raises for malformed workflows: anything that does not
have the expected shape simply contributes nothing.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from ..core.errors import WorkflowFileError
from ..core.models import (
    CORE_PACKAGE_ID,
    DEFAULT_NODE_VERSION,
    CustomNode,
    ModelCategory,
    ScanResult,
    WorkflowModels,
    WorkflowNode,
    parse_nodes,
    scalar_text,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WidgetSource:
    """Model name read from widgets_values[widget_index] of matching nodes."""
    node_types: Tuple[str, ...]
    widget_index: int = 0


@dataclass(frozen=True)
class PropertySource:
    """Model names read from properties.models entries of one node type."""
    node_type: str
    directory: str


@dataclass(frozen=True)
class CategorySource:
    """Everything that contributes to one model category."""
    category: ModelCategory
    widget_sources: Tuple[WidgetSource, ...] = field(default_factory=tuple)
    property_sources: Tuple[PropertySource, ...] = field(default_factory=tuple)


# Node type names are matched verbatim, including historical spellings.
CATEGORY_SOURCES: Tuple[CategorySource, ...] = (
    CategorySource(
        ModelCategory.CHECKPOINTS,
        widget_sources=(
            WidgetSource(("CheckpointLoaderSimple", "CheckpointLoader", "LoadCheckpoint")),
        ),
    ),
    CategorySource(
        ModelCategory.VAE,
        widget_sources=(WidgetSource(("VAELoader",)),),
        property_sources=(PropertySource("VAELoader", "vae"),),
    ),
    CategorySource(
        ModelCategory.LORAS,
        widget_sources=(WidgetSource(("LoraLoader", "LoraLoaderModelOnly")),),
    ),
    CategorySource(
        ModelCategory.UPSCALE_MODELS,
        widget_sources=(WidgetSource(("UpscaleModelLoader",)),),
    ),
    CategorySource(
        ModelCategory.CONTROLNET,
        widget_sources=(WidgetSource(("ControlNetLoader",)),),
    ),
    CategorySource(
        ModelCategory.CLIP,
        widget_sources=(WidgetSource(("CLIPLoader", "DualCLIPLoader")),),
    ),
    CategorySource(
        ModelCategory.CLIP_VISION,
        widget_sources=(WidgetSource(("CLIPVisionLoader",)),),
    ),
    CategorySource(
        ModelCategory.TEXT_ENCODERS,
        property_sources=(PropertySource("DualCLIPLoader", "text_encoders"),),
    ),
    CategorySource(
        ModelCategory.DIFFUSION_MODELS,
        widget_sources=(
            WidgetSource(("UnetLoader", "UNETLoader", "GGUFLoader", "DiffusionModelLoader")),
        ),
    ),
    CategorySource(
        ModelCategory.EMBEDDING,
        widget_sources=(WidgetSource(("EmbeddingLoader",)),),
    ),
    CategorySource(
        ModelCategory.STYLE_MODELS,
        widget_sources=(WidgetSource(("StyleModelLoader",)),),
    ),
    CategorySource(
        ModelCategory.HYPERNETWORKS,
        widget_sources=(WidgetSource(("HypernetworkLoader",)),),
    ),
    CategorySource(
        ModelCategory.GLIGEN,
        widget_sources=(WidgetSource(("GLIGENLoader",)),),
    ),
)


# =============================================================================
# Extraction primitives
# =============================================================================

def extract_models(
    nodes: Sequence[WorkflowNode],
    node_types: Iterable[str],
    widget_index: int,
) -> List[str]:
    """Collect widgets_values[widget_index] of nodes whose type matches."""
    wanted = set(node_types)
    found = set()
    for node in nodes:
        if node.type is None or node.type not in wanted:
            continue
        value = scalar_text(node.widget_value(widget_index))
        if value is not None:
            found.add(value)
    return sorted(found)


def extract_models_from_properties(
    nodes: Sequence[WorkflowNode],
    node_type: str,
    directory: str,
) -> List[str]:
    """Collect properties.models names tagged with the given directory."""
    found = set()
    for node in nodes:
        if node.type != node_type:
            continue
        for ref in node.properties.models:
            if ref.directory == directory and ref.name is not None:
                found.add(ref.name)
    return sorted(found)


def merge_models(*lists: Iterable[str]) -> List[str]:
    """Union of model lists, empty names dropped, ordinal sort."""
    merged = set()
    for models in lists:
        merged.update(name for name in models if name != "")
    return sorted(merged)


def extract_custom_nodes(nodes: Sequence[WorkflowNode]) -> List[CustomNode]:
    """
    Custom node packages referenced by the workflow.

    When several nodes carry the same cnr_id, the first one in node order
    decides the recorded version.
    """
    seen: Dict[str, CustomNode] = {}
    for node in nodes:
        package_id = node.properties.cnr_id
        if package_id is None or package_id == CORE_PACKAGE_ID:
            continue
        if package_id in seen:
            continue
        seen[package_id] = CustomNode(
            node=package_id,
            version=node.properties.ver or DEFAULT_NODE_VERSION,
        )
    return list(seen.values())


def collect_category(nodes: Sequence[WorkflowNode], source: CategorySource) -> List[str]:
    """Merge every widget and property source declared for one category."""
    lists = [
        extract_models(nodes, widget.node_types, widget.widget_index)
        for widget in source.widget_sources
    ]
    lists.extend(
        extract_models_from_properties(nodes, prop.node_type, prop.directory)
        for prop in source.property_sources
    )
    return merge_models(*lists)


# =============================================================================
# Scanner
# =============================================================================

class WorkflowScanner:
    """
    Scans ComfyUI workflow JSON for model and custom node dependencies.

    Stateless: one instance may be shared and called concurrently.
    """

    def __init__(self, sources: Tuple[CategorySource, ...] = CATEGORY_SOURCES):
        self.sources = sources

    def scan_workflow(self, workflow_data: Any) -> ScanResult:
        """
        Scan a workflow dictionary for dependencies.

        Non-dict input or a missing/non-list "nodes" key produces an empty
        manifest.
        """
        nodes = parse_nodes(workflow_data)

        categories = {
            source.category.value: collect_category(nodes, source)
            for source in self.sources
        }
        result = ScanResult(
            models=WorkflowModels(**categories),
            custom_nodes=extract_custom_nodes(nodes),
        )

        logger.debug(
            f"[Scanner] {len(nodes)} nodes -> "
            f"{sum(len(v) for v in categories.values())} models, "
            f"{len(result.custom_nodes)} custom nodes"
        )
        return result

    def scan_file(self, path: Path) -> ScanResult:
        """Scan a workflow JSON file."""
        return self.scan_workflow(load_workflow_file(path))


def load_workflow_file(path: Path) -> Any:
    """Read workflow JSON from disk, raising WorkflowFileError on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except ValueError as e:
        raise WorkflowFileError(f"JSON parse error in {path}: {e}") from e
    except OSError as e:
        raise WorkflowFileError(f"Error reading {path}: {e}") from e


def scan_workflow(workflow_data: Any) -> ScanResult:
    """Convenience function: scan one workflow dictionary."""
    return WorkflowScanner().scan_workflow(workflow_data)


def scan_workflow_file(path: Path) -> ScanResult:
    """Convenience function to scan a single workflow file."""
    return WorkflowScanner().scan_file(path)
