"""
Bucket access helpers.

Thin layer over a boto3 S3 client pointed at Scaleway object storage:
client construction, key layout and the few object operations the
collaborators need.

Bucket layout:
    models/{folder}/{model_name}
    custom-nodes/{node}/{version}/.marker
    workflows/{workflow_name}/{workflow_file_name}
    workflows/{workflow_name}/wf-scan-result.json
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config.settings import StorageConfig, get_config
from ..core.errors import StorageError
from ..core.models import CATEGORY_FOLDERS, CustomNode

logger = logging.getLogger(__name__)

SCAN_RESULT_FILENAME = "wf-scan-result.json"
CUSTOM_NODE_MARKER = ".marker"


def create_s3_client(storage: Optional[StorageConfig] = None) -> Any:
    """Create a boto3 S3 client for the configured bucket endpoint."""
    storage = storage or get_config().storage

    if not storage.access_key_id or not storage.secret_access_key:
        logger.warning("[Bucket] Storage credentials are not configured")

    return boto3.client(
        "s3",
        region_name=storage.region,
        endpoint_url=storage.endpoint_url,
        aws_access_key_id=storage.access_key_id or "",
        aws_secret_access_key=storage.secret_access_key or "",
    )


# =============================================================================
# Key layout
# =============================================================================

def model_object_key(category: str, model_name: str) -> str:
    folder = CATEGORY_FOLDERS.get(category, category)
    return f"models/{folder}/{model_name}"


def custom_node_marker_key(node: CustomNode) -> str:
    return f"{node.remote_prefix}{CUSTOM_NODE_MARKER}"


def workflow_prefix(workflow_name: str) -> str:
    return f"workflows/{workflow_name}/"


def workflow_object_key(workflow_name: str, filename: str) -> str:
    return f"{workflow_prefix(workflow_name)}{filename}"


# =============================================================================
# Object operations
# =============================================================================

def is_not_found(error: ClientError) -> bool:
    code = str(error.response.get("Error", {}).get("Code", ""))
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in ("404", "NotFound", "NoSuchKey") or status == 404


def object_exists(client: Any, bucket: str, key: str) -> bool:
    """
    HEAD an object.

    Not-found answers False. Any other failure is logged and also answers
    False, since a lookup that cannot confirm presence is treated as absent.
    """
    try:
        client.head_object(Bucket=bucket, Key=key)
        return True
    except ClientError as e:
        if is_not_found(e):
            return False
        logger.error(f"[Bucket] Error checking {key}: {e}")
        return False
    except BotoCoreError as e:
        logger.error(f"[Bucket] Error checking {key}: {e}")
        return False


def prefix_has_objects(client: Any, bucket: str, prefix: str) -> bool:
    response = client.list_objects_v2(Bucket=bucket, Prefix=prefix, MaxKeys=1)
    return bool(response.get("Contents"))


def put_json(client: Any, bucket: str, key: str, data: Any) -> None:
    """Upload a JSON document (pretty-printed)."""
    try:
        client.put_object(
            Bucket=bucket,
            Key=key,
            Body=json.dumps(data, indent=2).encode("utf-8"),
            ContentType="application/json",
        )
    except (ClientError, BotoCoreError) as e:
        raise StorageError(f"Failed to upload {key}: {e}") from e


def get_json(client: Any, bucket: str, key: str) -> Any:
    """Download and decode a JSON document."""
    try:
        response = client.get_object(Bucket=bucket, Key=key)
        body = response["Body"].read()
    except (ClientError, BotoCoreError) as e:
        raise StorageError(f"Failed to download {key}: {e}") from e

    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise StorageError(f"Invalid JSON in {key}: {e}") from e
