"""Pod instance models for the Marathon REST API.

Represents the instances returned by ``DELETE /v2/pods/{id}::instances``.
The returned records are snapshots taken at deletion time.
"""

from typing import Literal

from .types import InstanceID, MarathonModel, TaskCondition


class PodInstanceStateHistory(MarathonModel):
    """Lifecycle state of a pod instance."""

    condition: TaskCondition
    since: str | None = None
    active_since: str | None = None
    goal: str | None = None


class PodAgentInfo(MarathonModel):
    """Agent the instance was placed on."""

    host: str
    agent_id: str | None = None
    region: str | None = None
    zone: str | None = None
    attributes: list[str] | None = None


class IPAddress(MarathonModel):
    ip_address: str
    protocol: str | None = None


class PodNetworkInfo(MarathonModel):
    host_name: str | None = None
    host_ports: list[int] | None = None
    ip_addresses: list[IPAddress] | None = None


class PodTaskStatus(MarathonModel):
    """Current status of one task of a pod instance."""

    staged_at: str | None = None
    started_at: str | None = None
    mesos_status: str | None = None
    condition: TaskCondition
    network_info: PodNetworkInfo | None = None


class PodTask(MarathonModel):
    task_id: str
    run_spec_version: str | None = None
    status: PodTaskStatus


class UnreachableStrategy(MarathonModel):
    """How long an unreachable instance is kept before being replaced/expunged."""

    inactive_after_seconds: int
    expunge_after_seconds: int


class PodInstance(MarathonModel):
    """Pod instance as returned by the instance deletion endpoints."""

    instance_id: InstanceID
    agent_info: PodAgentInfo | None = None
    tasks_map: dict[str, PodTask] | None = None
    run_spec_version: str | None = None
    state: PodInstanceStateHistory
    unreachable_strategy: UnreachableStrategy | Literal["disabled"] | None = None

    def task(self, task_id: str) -> PodTask | None:
        """Return the task with the given id, or None if it is not part of the instance."""
        if not self.tasks_map:
            return None
        return self.tasks_map.get(task_id)
