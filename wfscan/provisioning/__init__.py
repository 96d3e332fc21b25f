"""
WFScan Provisioning Module

Contract and trigger for the external process that fetches missing
custom nodes into the bucket.
"""

from .plan import CustomNodeTarget, fetch_latest_comfyui_version, plan_custom_nodes
from .runner import ProvisioningEvent, ProvisioningRunner, scaleway_script_env

__all__ = [
    "CustomNodeTarget",
    "fetch_latest_comfyui_version",
    "plan_custom_nodes",
    "ProvisioningEvent",
    "ProvisioningRunner",
    "scaleway_script_env",
]
