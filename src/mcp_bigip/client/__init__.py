"""Transport client for the iControl REST API."""
from .rest import API_ROOT, BigIPClient, object_uri, uri

__all__ = ["API_ROOT", "BigIPClient", "object_uri", "uri"]
