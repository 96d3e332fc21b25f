"""
FastAPI dependencies for the bucket collaborators.

Routers receive checkers / uploaders / runners through Depends() so that
tests can swap them with app.dependency_overrides.
"""

from ..provisioning.runner import ProvisioningRunner
from ..storage.availability import AvailabilityChecker
from ..storage.factory import create_availability_checker, create_uploader
from ..storage.uploader import WorkflowUploader


def get_availability_checker() -> AvailabilityChecker:
    return create_availability_checker()


def get_uploader() -> WorkflowUploader:
    return create_uploader()


def get_provisioning_runner() -> ProvisioningRunner:
    return ProvisioningRunner.from_config()
