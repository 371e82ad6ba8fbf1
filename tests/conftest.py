"""Shared fixtures: an in-process fake of the Marathon v2 API.

The fake is a Starlette app reached through ``starlette.testclient.TestClient``,
which is an ``httpx.Client`` and can therefore be injected straight into
``MarathonClient``. Every request the fake receives is recorded so tests can
assert on method, path and body.
"""

import json
import pathlib
from typing import Any

import pytest
import starlette.applications
import starlette.requests
import starlette.responses
import starlette.routing
from starlette.testclient import TestClient

from marathon_client.restapi import MarathonClient

API_RESPONSES = pathlib.Path(__file__).parent / "api-responses"

FAKE_BASE_URL = "http://marathon.test:8080"
FAKE_APP_NAME = "fake-app"
FAKE_POD_NAME = "fake-pod"
SECOND_FAKE_POD_NAME = "fake-pod2"
FAKE_POD_INSTANCE_NAME = "fake-pod.instance-dc6cfe60-6812-11e7-a18e-70b3d5800003"
SECOND_FAKE_POD_INSTANCE_NAME = (
    "fake-pod2.instance-63c9735b-5ca0-11e9-98d6-1eb6fdf96d81"
)


def load_api_response(name: str) -> Any:
    """Load a sample API response from tests/api-responses."""
    return json.loads((API_RESPONSES / name).read_text())


def single_item_queue() -> dict[str, Any]:
    """Queue response with exactly one pending application launch."""
    sample = load_api_response("v2-queue.json")
    return {"queue": [sample["queue"][0]]}


def pod_instance_response(instance_id: str, legacy_format: bool) -> dict[str, Any]:
    """Pod instance as Marathon returns it after the instance was killed.

    ``legacy_format`` selects the wrapped ``{"idString": ...}`` and
    ``{"str": ...}`` shapes used by older Marathon releases.
    """

    def wrap(value: str, key: str) -> Any:
        return {key: value} if legacy_format else value

    task_id = f"{instance_id}.sleep1"
    return {
        "instanceId": wrap(instance_id, "idString"),
        "agentInfo": {
            "host": "10.0.1.22",
            "agentId": "c4f8d1e2-9a0f-4f1e-8a4b-2d4e1c7f3b9d-S0",
            "region": "us-west-2",
            "zone": "us-west-2a",
            "attributes": [],
        },
        "tasksMap": {
            task_id: {
                "taskId": task_id,
                "runSpecVersion": "2017-07-14T21:23:58.215Z",
                "status": {
                    "stagedAt": "2017-07-14T21:24:01.371Z",
                    "startedAt": "2017-07-14T21:24:02.566Z",
                    "mesosStatus": "TASK_RUNNING",
                    "condition": wrap("Running", "str"),
                    "networkInfo": {
                        "hostName": "10.0.1.22",
                        "hostPorts": [],
                        "ipAddresses": [
                            {"ipAddress": "10.0.1.22", "protocol": "IPv4"},
                        ],
                    },
                },
            },
        },
        "runSpecVersion": "2017-07-14T21:23:58.215Z",
        "state": {
            "condition": wrap("Running", "str"),
            "since": "2017-07-14T21:24:02.566Z",
            "activeSince": "2017-07-14T21:24:02.566Z",
            "goal": "Decommissioned",
        },
        "unreachableStrategy": {
            "inactiveAfterSeconds": 300,
            "expungeAfterSeconds": 600,
        },
    }


class FakeMarathon:
    """Routes for the subset of the Marathon API used by the client."""

    def __init__(self):
        self.requests: list[dict[str, Any]] = []
        self.queue_response: Any = single_item_queue()
        self.app = starlette.applications.Starlette(
            routes=[
                starlette.routing.Route(
                    "/v2/queue",
                    self.get_queue,
                    methods=["GET"],
                ),
                starlette.routing.Route(
                    "/v2/queue/{app_id:path}/delay",
                    self.delete_queue_delay,
                    methods=["DELETE"],
                ),
                starlette.routing.Route(
                    "/v2/pods/{pod_id}::instances",
                    self.delete_pod_instances,
                    methods=["DELETE"],
                ),
                starlette.routing.Route(
                    "/v2/pods/{pod_id}::instances/{instance_id}",
                    self.delete_pod_instance,
                    methods=["DELETE"],
                ),
            ],
        )

    async def _record(self, request: starlette.requests.Request) -> None:
        body = await request.body()
        self.requests.append(
            {
                "method": request.method,
                "path": request.url.path,
                "body": json.loads(body) if body else None,
            },
        )

    async def get_queue(
        self,
        request: starlette.requests.Request,
    ) -> starlette.responses.Response:
        await self._record(request)
        return starlette.responses.JSONResponse(self.queue_response)

    async def delete_queue_delay(
        self,
        request: starlette.requests.Request,
    ) -> starlette.responses.Response:
        await self._record(request)
        return starlette.responses.Response(status_code=204)

    async def delete_pod_instance(
        self,
        request: starlette.requests.Request,
    ) -> starlette.responses.Response:
        await self._record(request)
        instance_id = request.path_params["instance_id"]
        if not instance_id.startswith(request.path_params["pod_id"] + "."):
            return starlette.responses.JSONResponse(
                {"message": f"Instance '{instance_id}' does not exist"},
                status_code=404,
            )
        return starlette.responses.JSONResponse(
            pod_instance_response(instance_id, legacy_format=True),
        )

    async def delete_pod_instances(
        self,
        request: starlette.requests.Request,
    ) -> starlette.responses.Response:
        await self._record(request)
        instance_ids = await request.json()
        # Marathon does not guarantee the order of the returned instances
        return starlette.responses.JSONResponse(
            [
                pod_instance_response(instance_id, legacy_format=False)
                for instance_id in reversed(instance_ids)
            ],
        )


@pytest.fixture
def fake_marathon() -> FakeMarathon:
    """Fresh fake Marathon endpoint."""
    return FakeMarathon()


@pytest.fixture
def marathon_client(fake_marathon: FakeMarathon):
    """MarathonClient wired to the fake endpoint."""
    with TestClient(fake_marathon.app, base_url=FAKE_BASE_URL) as http_client:
        yield MarathonClient(base_url=FAKE_BASE_URL, http_client=http_client)
