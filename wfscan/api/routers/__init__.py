"""API Routers."""
from . import scan, availability, upload, provision
