"""
Tests for the bucket collaborators.

Verifies:
- Key layout (models/, custom-nodes/, workflows/)
- Availability checks: found, 404, other errors, unknown categories
- Uploads: conflict detection, stored manifest contents, read back
"""

from unittest.mock import MagicMock, patch

import pytest

from wfscan.config.settings import StorageConfig
from wfscan.core.errors import StorageError, WorkflowExistsError
from wfscan.core.models import CustomNode, ScanResult, WorkflowModels
from wfscan.storage.availability import AvailabilityChecker
from wfscan.storage.bucket import (
    create_s3_client,
    custom_node_marker_key,
    get_json,
    model_object_key,
    object_exists,
    put_json,
    workflow_object_key,
)
from wfscan.storage.factory import create_availability_checker, create_uploader
from wfscan.storage.uploader import WorkflowUploader
from wfscan.workflows.scanner import scan_workflow
from tests.helpers.fixtures import FakeS3Client, client_error, flux_workflow


# =============================================================================
# Bucket helpers
# =============================================================================

class TestKeys:

    def test_model_key_uses_storage_folder(self):
        assert model_object_key("embedding", "easynegative.pt") == "models/embeddings/easynegative.pt"
        assert model_object_key("vae", "ae.safetensors") == "models/vae/ae.safetensors"

    def test_custom_node_marker(self):
        node = CustomNode(node="comfyui-kjnodes", version="1.1.0")
        assert custom_node_marker_key(node) == "custom-nodes/comfyui-kjnodes/1.1.0/.marker"

    def test_workflow_key(self):
        assert workflow_object_key("flux", "wf.json") == "workflows/flux/wf.json"


class TestObjectExists:

    def test_found(self):
        client = FakeS3Client({"models/vae/ae.safetensors": b"x"})
        assert object_exists(client, "bucket", "models/vae/ae.safetensors") is True

    @pytest.mark.parametrize("code", ["404", "NotFound", "NoSuchKey"])
    def test_not_found(self, code):
        client = MagicMock()
        client.head_object.side_effect = client_error(code, 404)
        assert object_exists(client, "bucket", "k") is False

    def test_other_errors_report_absent(self):
        client = MagicMock()
        client.head_object.side_effect = client_error("AccessDenied", 403)
        assert object_exists(client, "bucket", "k") is False


class TestJsonObjects:

    def test_put_then_get(self, fake_s3):
        put_json(fake_s3, "bucket", "a.json", {"x": [1, 2]})
        assert get_json(fake_s3, "bucket", "a.json") == {"x": [1, 2]}

    def test_get_missing_raises(self, fake_s3):
        with pytest.raises(StorageError):
            get_json(fake_s3, "bucket", "missing.json")

    def test_get_invalid_json_raises(self, fake_s3):
        fake_s3.add("bad.json", b"{nope")
        with pytest.raises(StorageError):
            get_json(fake_s3, "bucket", "bad.json")

    def test_put_failure_raises(self):
        client = MagicMock()
        client.put_object.side_effect = client_error("InternalError", 500, "PutObject")
        with pytest.raises(StorageError):
            put_json(client, "bucket", "a.json", {})


def test_create_s3_client_uses_scaleway_endpoint():
    storage = StorageConfig(
        region="nl-ams",
        access_key_id="AK",
        secret_access_key="SK",
        bucket_name="b",
        custom_endpoint_url=None,
    )
    with patch("wfscan.storage.bucket.boto3.client") as mock_client:
        create_s3_client(storage)
    mock_client.assert_called_once_with(
        "s3",
        region_name="nl-ams",
        endpoint_url="https://s3.nl-ams.scw.cloud",
        aws_access_key_id="AK",
        aws_secret_access_key="SK",
    )


# =============================================================================
# Availability
# =============================================================================

class TestAvailabilityChecker:

    def test_reports_presence_per_entry(self, fake_s3):
        fake_s3.add("models/checkpoints/flux1-dev.safetensors")
        fake_s3.add("custom-nodes/custom-controlnet-node/1.2.0/.marker")
        checker = AvailabilityChecker(fake_s3, "bucket", max_workers=4)

        status = checker.check(scan_workflow(flux_workflow()))

        assert status.custom_nodes == {"custom-controlnet-node@1.2.0": True}
        assert status.models == {
            "checkpoints": {"flux1-dev.safetensors": True},
            "vae": {"ae.safetensors": False},
            "loras": {"flux-realism-lora.safetensors": False},
        }

    def test_empty_categories_are_left_unknown(self, fake_s3):
        result = ScanResult(models=WorkflowModels(vae=["ae.safetensors"]))
        status = AvailabilityChecker(fake_s3, "bucket").check(result)
        assert list(status.models) == ["vae"]
        assert status.model_available("loras", "anything") is None

    def test_embedding_uses_embeddings_folder(self, fake_s3):
        fake_s3.add("models/embeddings/neg.pt")
        result = ScanResult(models=WorkflowModels(embedding=["neg.pt"]))
        status = AvailabilityChecker(fake_s3, "bucket").check(result)
        assert status.models == {"embedding": {"neg.pt": True}}
        assert fake_s3.head_calls == ["models/embeddings/neg.pt"]

    def test_lookup_errors_count_as_missing(self, fake_s3):
        fake_s3.add("models/vae/ae.safetensors")
        fake_s3.failing_keys["models/vae/ae.safetensors"] = client_error("SlowDown", 503)
        result = ScanResult(models=WorkflowModels(vae=["ae.safetensors"]))
        status = AvailabilityChecker(fake_s3, "bucket").check(result)
        assert status.models["vae"]["ae.safetensors"] is False

    def test_empty_manifest_makes_no_requests(self, fake_s3):
        status = AvailabilityChecker(fake_s3, "bucket").check(ScanResult())
        assert status.to_dict() == {"customNodes": {}, "models": {}}
        assert fake_s3.head_calls == []


# =============================================================================
# Upload
# =============================================================================

class TestWorkflowUploader:

    def test_upload_writes_workflow_and_scan_result(self, fake_s3):
        workflow = flux_workflow()
        result = scan_workflow(workflow)
        uploader = WorkflowUploader(fake_s3, "konama-storage")

        uploaded = uploader.upload("flux", result, workflow, "flux.json", ["ae.safetensors"])

        assert uploaded.location == "s3://konama-storage/workflows/flux/"
        assert uploaded.files == ["workflows/flux/flux.json", "workflows/flux/wf-scan-result.json"]
        assert fake_s3.json_object("workflows/flux/flux.json") == workflow
        stored = fake_s3.json_object("workflows/flux/wf-scan-result.json")
        assert stored["required_models"] == ["ae.safetensors"]
        assert stored["custom-nodes"] == [{"node": "custom-controlnet-node", "version": "1.2.0"}]

    def test_required_models_default_to_empty(self, fake_s3):
        WorkflowUploader(fake_s3, "b").upload("wf", ScanResult(), {"nodes": []}, "wf.json")
        assert fake_s3.json_object("workflows/wf/wf-scan-result.json")["required_models"] == []

    def test_existing_folder_is_rejected(self, fake_s3):
        fake_s3.add("workflows/flux/old.json")
        uploader = WorkflowUploader(fake_s3, "b")
        with pytest.raises(WorkflowExistsError):
            uploader.upload("flux", ScanResult(), {"nodes": []}, "flux.json")
        assert "workflows/flux/wf-scan-result.json" not in fake_s3.objects

    def test_similar_prefix_is_not_a_conflict(self, fake_s3):
        fake_s3.add("workflows/flux-upscale/wf.json")
        WorkflowUploader(fake_s3, "b").upload("flux", ScanResult(), {"nodes": []}, "flux.json")
        assert "workflows/flux/flux.json" in fake_s3.objects

    def test_listing_failure_does_not_block_upload(self):
        client = MagicMock()
        client.list_objects_v2.side_effect = client_error("InternalError", 500, "ListObjectsV2")
        uploaded = WorkflowUploader(client, "b").upload("wf", ScanResult(), {"nodes": []}, "wf.json")
        assert len(uploaded.files) == 2
        assert client.put_object.call_count == 2

    @pytest.mark.parametrize("name, filename", [("", "wf.json"), ("   ", "wf.json"), ("wf", "")])
    def test_missing_names_raise(self, fake_s3, name, filename):
        with pytest.raises(ValueError):
            WorkflowUploader(fake_s3, "b").upload(name, ScanResult(), {"nodes": []}, filename)

    def test_output_name_is_trimmed(self, fake_s3):
        uploaded = WorkflowUploader(fake_s3, "b").upload("  flux  ", ScanResult(), {"nodes": []}, "f.json")
        assert uploaded.location == "s3://b/workflows/flux/"

    def test_load_scan_result_round_trip(self, fake_s3):
        uploader = WorkflowUploader(fake_s3, "b")
        result = scan_workflow(flux_workflow())
        uploader.upload("flux", result, flux_workflow(), "flux.json", [])

        loaded = uploader.load_scan_result("flux")
        assert loaded.models == result.models
        assert loaded.custom_nodes == result.custom_nodes
        assert loaded.required_models == []

    def test_load_malformed_scan_result(self, fake_s3):
        fake_s3.add("workflows/x/wf-scan-result.json", b'{"custom-nodes": "nope"}')
        with pytest.raises(StorageError):
            WorkflowUploader(fake_s3, "b").load_scan_result("x")


# =============================================================================
# Factories
# =============================================================================

class TestFactories:

    def test_checker_uses_configured_bucket(self, monkeypatch):
        monkeypatch.setenv("SCALEWAY_BUCKET_NAME", "team-models")
        with patch("wfscan.storage.bucket.boto3.client") as mock_client:
            checker = create_availability_checker()
        assert checker.bucket == "team-models"
        assert checker.client is mock_client.return_value
        assert checker.max_workers == 16

    def test_uploader_uses_explicit_storage(self):
        storage = StorageConfig(region="fr-par", bucket_name="other")
        with patch("wfscan.storage.bucket.boto3.client") as mock_client:
            uploader = create_uploader(storage)
        assert uploader.bucket == "other"
        assert mock_client.call_args.kwargs["endpoint_url"] == "https://s3.fr-par.scw.cloud"
