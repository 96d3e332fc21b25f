"""Exception hierarchy shared by the scanner, storage and provisioning layers."""


class WFScanError(Exception):
    """Base exception for all WFScan errors."""
    pass


class WorkflowFileError(WFScanError):
    """Workflow file could not be read or is not JSON."""
    pass


class StorageError(WFScanError):
    """Error talking to the object storage bucket."""
    pass


class WorkflowExistsError(StorageError):
    """Target workflow folder already holds objects in the bucket."""
    pass


class ProvisioningError(WFScanError):
    """Error preparing or running the provisioning process."""
    pass
