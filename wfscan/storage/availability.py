"""
Availability Checker

Cross-checks a scan result against the bucket. Each custom node is looked
up through its marker object, each model through its file key. Lookups run
concurrently and are folded into one AvailabilityStatus keyed like the
manifest.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Tuple

from ..core.models import AvailabilityStatus, ScanResult
from .bucket import custom_node_marker_key, model_object_key, object_exists

logger = logging.getLogger(__name__)


class AvailabilityChecker:
    """Resolves manifest entries to presence in the bucket."""

    def __init__(self, client: Any, bucket: str, max_workers: int = 16):
        self.client = client
        self.bucket = bucket
        self.max_workers = max_workers

    def exists(self, key: str) -> bool:
        return object_exists(self.client, self.bucket, key)

    def check(self, scan_result: ScanResult) -> AvailabilityStatus:
        """
        Check every custom node and model of a scan result.

        Categories without models get no entry at all, so callers read
        them as "unknown" rather than "missing".
        """
        status = AvailabilityStatus()

        # (kind, category, entry name, bucket key)
        lookups: List[Tuple[str, Optional[str], str, str]] = []
        for node in scan_result.custom_nodes:
            lookups.append(("node", None, node.key, custom_node_marker_key(node)))

        for category, models in scan_result.models.iter_categories():
            if not models:
                continue
            status.models[category] = {}
            for model in models:
                if not model:
                    continue
                lookups.append(("model", category, model, model_object_key(category, model)))

        if not lookups:
            return status

        logger.info(f"[Availability] Checking {len(lookups)} object(s) in {self.bucket}")

        results: Dict[Tuple[str, Optional[str], str], bool] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.exists, key): (kind, category, name)
                for kind, category, name, key in lookups
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        # Fold in lookup order so the report is stable
        for kind, category, name, _ in lookups:
            exists = results[(kind, category, name)]
            if kind == "node":
                status.custom_nodes[name] = exists
            else:
                status.models[category][name] = exists

        missing = sum(1 for exists in results.values() if not exists)
        logger.info(f"[Availability] {len(results) - missing} available, {missing} missing")
        return status
