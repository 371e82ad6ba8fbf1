"""Marathon REST API client.

Provides an HTTP client for the launch queue and pod instance endpoints of
the Marathon v2 API, with thread-local connections and response validation
using Pydantic models.
"""

import threading
import time
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import httpx
import pydantic
import structlog

from .pods import PodInstance
from .queue import Queue

logger = structlog.get_logger(__name__)

API_QUEUE = "/v2/queue"
API_PODS = "/v2/pods"

DEFAULT_TIMEOUT = 30.0

T = TypeVar("T")

_POD_INSTANCE_LIST = pydantic.TypeAdapter(list[PodInstance])


class DecodeError(ValueError):
    """Raised when a response body does not match the expected shape.

    Attributes:
        endpoint: API path the response came from.
        errors: Pydantic error details when validation failed, each with the
            ``loc`` of the offending field.
    """

    def __init__(
        self,
        endpoint: str,
        message: str,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint
        self.errors = errors or []


def trim_root_path(path: str) -> str:
    """Strip one leading '/' so ids can be given as "/app" or "app"."""
    return path.removeprefix("/")


def pod_instances_uri(pod_name: str) -> str:
    """Build the path addressing the instances of a pod."""
    return f"{API_PODS}/{trim_root_path(pod_name)}::instances"


class MarathonClient:
    """HTTP client for the Marathon REST API.

    Returns Pydantic-validated models for every response. Transport errors
    (``httpx.HTTPError``) propagate unchanged; responses that cannot be
    decoded raise :class:`DecodeError`. Nothing is retried.

    Thread-safe through thread-local storage of httpx.Client instances,
    unless an ``http_client`` is injected, in which case that client is
    shared. Can be used as a context manager for automatic cleanup.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ):
        """Initialize the REST API client.

        Args:
            base_url: Base URL of the Marathon API (e.g., "http://marathon:8080").
            timeout: Request timeout in seconds (default: 30.0).
            http_client: Preconfigured client to use instead of creating
                one per thread. Requests are made with paths relative to
                its own base URL.

        Raises:
            ValueError: If base_url is empty or timeout is not positive.
        """
        if not base_url:
            msg = "base_url cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        self._http_client = http_client

        # Use thread-local storage for httpx.Client (thread safety)
        self._local = threading.local()

    @property
    def client(self) -> httpx.Client:
        """Get the injected client, or create the thread-local one.

        Returns:
            httpx.Client used for the current thread.
        """
        if self._http_client is not None:
            return self._http_client
        if not hasattr(self._local, "client") or self._local.client.is_closed:
            self._local.client = httpx.Client(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self._timeout,
            )
        return self._local.client

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close the thread-local HTTP client if open.

        An injected client is owned by the caller and left open.
        """
        if hasattr(self._local, "client") and not self._local.client.is_closed:
            self._local.client.close()

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Make one HTTP round trip to the Marathon API.

        Args:
            method: HTTP method.
            endpoint: API endpoint path (e.g., "/v2/queue").
            params: Optional query parameters.
            body: Optional JSON-serializable request body.

        Returns:
            Decoded JSON response, or None when the response has no body.

        Raises:
            httpx.HTTPError: If the HTTP request fails.
            DecodeError: If the response body is not valid UTF-8 JSON.
        """
        start_time = time.time()
        params = params or {}

        try:
            logger.debug(
                "Making API request",
                method=method,
                endpoint=endpoint,
                params=params,
            )
            response = self.client.request(method, endpoint, params=params, json=body)
            if response.is_error:
                _log_api_error(response)
            response.raise_for_status()
            duration = time.time() - start_time
            logger.debug("API request completed", duration_seconds=round(duration, 3))
        except httpx.HTTPError:
            duration = time.time() - start_time
            logger.exception(
                "API request failed",
                method=method,
                endpoint=endpoint,
                duration_seconds=round(duration, 3),
            )
            raise

        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(endpoint, f"invalid JSON response: {exc}") from exc

    def _api_get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """Make a GET request.

        Args:
            endpoint: API endpoint path.
            params: Optional query parameters.

        Returns:
            Decoded JSON response, or None when the response has no body.

        Raises:
            httpx.HTTPError: If HTTP request fails.
            DecodeError: If the response body is not valid JSON.
        """
        return self._request("GET", endpoint, params=params)

    def _api_delete(self, endpoint: str, body: Any = None) -> Any:
        """Make a DELETE request, optionally with a JSON body.

        Args:
            endpoint: API endpoint path.
            body: Optional JSON-serializable request body.

        Returns:
            Decoded JSON response, or None when the response has no body.

        Raises:
            httpx.HTTPError: If HTTP request fails.
            DecodeError: If the response body is not valid JSON.
        """
        return self._request("DELETE", endpoint, body=body)

    def queue(self) -> Queue:
        """Fetch the content of the launch queue.

        Returns:
            Validated Queue with one item per pending app or pod launch.

        Raises:
            httpx.HTTPError: If HTTP request fails.
            DecodeError: If the response does not match the queue schema.
        """
        data = self._api_get(API_QUEUE)
        return _decode(API_QUEUE, data, Queue.model_validate)

    def delete_queue_delay(self, app_id: str) -> None:
        """Reset the launch delay of an application.

        Args:
            app_id: Application id, with or without the leading '/'.

        Raises:
            httpx.HTTPError: If HTTP request fails.
        """
        endpoint = f"{API_QUEUE}/{trim_root_path(app_id)}/delay"
        self._api_delete(endpoint)
        logger.info("Reset launch delay", app_id=app_id)

    def delete_pod_instance(self, pod_name: str, instance_id: str) -> PodInstance:
        """Delete one instance of a pod.

        Args:
            pod_name: Pod id, with or without the leading '/'.
            instance_id: Id of the instance to kill.

        Returns:
            The instance as the server saw it at deletion time.

        Raises:
            httpx.HTTPError: If HTTP request fails.
            DecodeError: If the response is not a pod instance.
        """
        endpoint = f"{pod_instances_uri(pod_name)}/{instance_id}"
        data = self._api_delete(endpoint)
        return _decode(endpoint, data, PodInstance.model_validate)

    def delete_pod_instances(
        self,
        pod_name: str,
        instance_ids: Sequence[str],
    ) -> list[PodInstance]:
        """Delete several instances of a pod in one request.

        Args:
            pod_name: Pod id, with or without the leading '/'.
            instance_ids: Ids of the instances to kill.

        Returns:
            The deleted instances, in the order chosen by the server.

        Raises:
            httpx.HTTPError: If HTTP request fails.
            DecodeError: If the response is not a list of pod instances.
        """
        endpoint = pod_instances_uri(pod_name)
        data = self._api_delete(endpoint, body=list(instance_ids))
        instances = _decode(endpoint, data, _POD_INSTANCE_LIST.validate_python)
        logger.info(
            "Deleted pod instances",
            pod=pod_name,
            requested=len(instance_ids),
            deleted=len(instances),
        )
        return instances


def _log_api_error(response: httpx.Response) -> None:
    """Log the message Marathon puts in error responses, if any.

    Bodies that are not JSON (or not UTF-8) are ignored so the HTTP status
    error is still raised by the caller.
    """
    try:
        payload = response.json()
    except ValueError:
        return
    if isinstance(payload, dict) and "message" in payload:
        logger.error(
            "API error response",
            status_code=response.status_code,
            error_message=payload["message"],
        )


def _decode(endpoint: str, data: Any, validate: Callable[[Any], T]) -> T:
    """Validate decoded JSON, converting failures into DecodeError.

    Args:
        endpoint: API path the data came from, for error reporting.
        data: Decoded JSON body, or None for an empty body.
        validate: Pydantic validation function for the expected type.

    Returns:
        The validated value.

    Raises:
        DecodeError: If the body is empty or fails validation.
    """
    if data is None:
        raise DecodeError(endpoint, "empty response body")
    try:
        return validate(data)
    except pydantic.ValidationError as exc:
        raise DecodeError(endpoint, str(exc), errors=exc.errors()) from exc
