"""WFScan HTTP API."""
