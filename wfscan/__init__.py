"""
WFScan - ComfyUI workflow dependency scanner.

Extracts model and custom node dependencies from workflow graphs, checks
them against an object storage bucket and triggers provisioning of what
is missing.
"""

__version__ = "1.0.0"
