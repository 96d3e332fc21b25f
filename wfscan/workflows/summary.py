"""
Scan result summaries.

Counting helpers for display, plus bookkeeping for the "required models"
selection that is persisted next to a manifest. Required models are keyed
as "category:model" while selecting, and stored as bare model names.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from ..core.models import CATEGORY_LABELS, AvailabilityStatus, ScanResult, WorkflowModels


@dataclass
class CategoryCount:
    key: str
    category: str
    count: int


def model_count(models: Sequence[str]) -> int:
    return len(models)


def total_model_count(models: WorkflowModels) -> int:
    return sum(len(names) for _, names in models.iter_categories())


def categories_with_models(models: WorkflowModels) -> List[CategoryCount]:
    """Labelled counts of non-empty categories, in category order."""
    return [
        CategoryCount(key=category, category=CATEGORY_LABELS[category], count=len(names))
        for category, names in models.iter_categories()
        if names
    ]


def model_key(category: str, model: str) -> str:
    return f"{category}:{model}"


def split_model_key(key: str) -> tuple:
    category, _, model = key.partition(":")
    return category, model


def model_keys(scan_result: ScanResult) -> List[str]:
    """Every model of the manifest as a "category:model" key."""
    return [
        model_key(category, name)
        for category, names in scan_result.models.iter_categories()
        for name in names
    ]


def missing_required_models(
    availability: AvailabilityStatus,
    required_keys: Iterable[str],
) -> List[str]:
    """
    Names of required models the bucket reported as missing.

    Only an explicit False counts; unchecked entries are not missing.
    """
    missing = []
    for key in required_keys:
        category, model = split_model_key(key)
        if availability.model_available(category, model) is False:
            missing.append(model)
    return missing


def required_model_names(required_keys: Iterable[str]) -> List[str]:
    return [split_model_key(key)[1] for key in required_keys]
