"""
Test fixtures and helpers for WFScan tests.

Provides:
- Workflow / node builders
- Fake S3 client for offline bucket tests
"""

from __future__ import annotations

import io
import json
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError


def make_node(
    node_type: Optional[str] = None,
    widgets: Optional[List[Any]] = None,
    properties: Optional[Dict[str, Any]] = None,
    node_id: int = 1,
) -> Dict[str, Any]:
    """Build a raw workflow node dict; omitted fields stay absent."""
    node: Dict[str, Any] = {"id": node_id}
    if node_type is not None:
        node["type"] = node_type
    if widgets is not None:
        node["widgets_values"] = widgets
    if properties is not None:
        node["properties"] = properties
    return node


def make_workflow(*nodes: Dict[str, Any]) -> Dict[str, Any]:
    return {"nodes": list(nodes)}


def flux_workflow() -> Dict[str, Any]:
    """Checkpoint + VAE + LoRA + one custom node package."""
    return make_workflow(
        make_node("CheckpointLoaderSimple", ["flux1-dev.safetensors"], node_id=1),
        make_node("VAELoader", ["ae.safetensors"], node_id=2),
        make_node("LoraLoader", ["flux-realism-lora.safetensors", 1.0, 1.0], node_id=3),
        make_node(
            "ControlNetApplyAdvanced",
            [1.0, 0.0, 1.0],
            {"cnr_id": "custom-controlnet-node", "ver": "1.2.0"},
            node_id=4,
        ),
    )


def client_error(code: str, status: int, operation: str = "HeadObject") -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeS3Client:
    """In-memory stand-in for the handful of boto3 S3 calls we use."""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None):
        self.objects: Dict[str, bytes] = dict(objects or {})
        self.head_calls: List[str] = []
        self.failing_keys: Dict[str, ClientError] = {}

    def add(self, key: str, body: bytes = b"") -> None:
        self.objects[key] = body

    def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        self.head_calls.append(Key)
        if Key in self.failing_keys:
            raise self.failing_keys[Key]
        if Key not in self.objects:
            raise client_error("404", 404)
        return {"ContentLength": len(self.objects[Key])}

    def list_objects_v2(self, Bucket: str, Prefix: str = "", MaxKeys: int = 1000) -> Dict[str, Any]:
        keys = sorted(k for k in self.objects if k.startswith(Prefix))[:MaxKeys]
        response: Dict[str, Any] = {"KeyCount": len(keys)}
        if keys:
            response["Contents"] = [{"Key": k} for k in keys]
        return response

    def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str = "") -> Dict[str, Any]:
        self.objects[Key] = Body
        return {}

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        if Key not in self.objects:
            raise client_error("NoSuchKey", 404, "GetObject")
        return {"Body": io.BytesIO(self.objects[Key])}

    def json_object(self, key: str) -> Any:
        return json.loads(self.objects[key])
