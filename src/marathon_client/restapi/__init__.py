"""Marathon REST API client package.

Provides an HTTP client for the Marathon v2 API that returns validated
response models with minimal processing.

Exports:
    MarathonClient: HTTP client for the queue and pod instance endpoints.
    DecodeError: Raised when a response cannot be decoded.
    queue: Module containing the launch queue models.
    pods: Module containing the pod instance models.
    types: Module containing the shared model base and dual-format types.
    DEFAULT_TIMEOUT: Default HTTP request timeout.
"""

from . import pods, queue, types
from .client import (
    DEFAULT_TIMEOUT,
    DecodeError,
    MarathonClient,
    pod_instances_uri,
    trim_root_path,
)

__all__ = [
    "DEFAULT_TIMEOUT",
    "DecodeError",
    "MarathonClient",
    "pod_instances_uri",
    "pods",
    "queue",
    "trim_root_path",
    "types",
]
