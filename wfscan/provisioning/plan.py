"""
Provisioning contract.

The provisioning process only consumes the "custom-nodes" list of a
stored scan result. For each entry it installs the package with comfy-cli
and syncs it to custom-nodes/{node}/{version}/ in the bucket. This module
spells out those targets and resolves the ComfyUI release to install
against.
"""

from dataclasses import dataclass
from typing import List, Optional

import requests

from ..core.errors import ProvisioningError
from ..core.models import ScanResult

COMFYUI_LATEST_RELEASE_URL = "https://api.github.com/repos/comfyanonymous/ComfyUI/releases/latest"


@dataclass
class CustomNodeTarget:
    node: str
    version: str
    remote_prefix: str


def plan_custom_nodes(scan_result: ScanResult) -> List[CustomNodeTarget]:
    return [
        CustomNodeTarget(node=node.node, version=node.version, remote_prefix=node.remote_prefix)
        for node in scan_result.custom_nodes
    ]


def fetch_latest_comfyui_version(
    session: Optional[requests.Session] = None,
    timeout: int = 30,
) -> str:
    """Latest stable ComfyUI release tag, without the leading "v"."""
    http = session or requests.Session()
    try:
        response = http.get(COMFYUI_LATEST_RELEASE_URL, timeout=timeout)
        response.raise_for_status()
        tag = response.json().get("tag_name")
    except (requests.RequestException, ValueError) as e:
        raise ProvisioningError(f"Failed to fetch ComfyUI version from GitHub: {e}") from e

    if not tag or not isinstance(tag, str):
        raise ProvisioningError("GitHub release response has no tag_name")
    return tag[1:] if tag.startswith("v") else tag
