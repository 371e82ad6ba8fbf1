"""Launch queue models for the Marathon REST API.

Represents the response of ``GET /v2/queue``: one item per application or pod
that still has instances waiting to be placed, together with the scheduler's
offer matching statistics for that launch.
"""

import pydantic

from .types import MarathonModel


class NumberRange(MarathonModel):
    """Inclusive numeric range, e.g. a block of ports."""

    begin: int
    end: int


class OfferResource(MarathonModel):
    """Named resource advertised by an agent (cpus, mem, ports, ...)."""

    name: str
    role: str | None = None
    scalar: float | None = None
    ranges: list[NumberRange] | None = None
    set: list[str] | None = None


class AgentAttribute(MarathonModel):
    """Attribute of the agent that made an offer."""

    name: str
    text: str | None = None
    scalar: float | None = None
    ranges: list[NumberRange] | None = None
    set: list[str] | None = None


class Offer(MarathonModel):
    """Resource offer made by an agent to the scheduler."""

    id: str
    agent_id: str
    hostname: str
    resources: list[OfferResource] | None = None
    attributes: list[AgentAttribute] | None = None


class UnusedOffer(MarathonModel):
    """Offer the scheduler declined for a pending launch, with the reasons."""

    offer: Offer
    reason: list[str] | None = None
    timestamp: str


class DeclinedOfferStep(MarathonModel):
    """How many offers were declined for one reason out of those processed."""

    reason: str
    declined: int
    processed: int


class ProcessedOffersSummary(MarathonModel):
    """Offer matching statistics for one queue item.

    ``last_unused_offer_at`` and ``last_used_offer_at`` are ``None`` when no
    such offer has been seen yet.
    """

    processed_offers_count: int
    unused_offers_count: int
    last_unused_offer_at: str | None = None
    last_used_offer_at: str | None = None
    reject_summary_last_offers: list[DeclinedOfferStep] | None = None
    reject_summary_launch_attempt: list[DeclinedOfferStep] | None = None


class Delay(MarathonModel):
    """Backoff applied before the scheduler retries a launch."""

    time_left_seconds: int = pydantic.Field(ge=0)
    overdue: bool


class Application(MarathonModel):
    """Application definition embedded in a queue item.

    Only ``id`` is typed; the rest of the app definition is kept as extra
    fields.
    """

    id: str


class Pod(MarathonModel):
    """Pod definition embedded in a queue item.

    Only ``id`` is typed; the rest of the pod definition is kept as extra
    fields.
    """

    id: str


class QueueItem(MarathonModel):
    """Pending launch of an application or a pod."""

    count: int | None = None
    delay: Delay | None = None
    since: str | None = None
    application: Application | None = pydantic.Field(None, alias="app")
    pod: Pod | None = None
    role: str | None = None
    processed_offers_summary: ProcessedOffersSummary | None = None
    last_unused_offers: list[UnusedOffer] | None = None

    @pydantic.model_validator(mode="after")
    def _check_single_run_spec(self) -> "QueueItem":
        if self.application is not None and self.pod is not None:
            msg = "queue item cannot reference both an app and a pod"
            raise ValueError(msg)
        return self

    @property
    def run_spec_id(self) -> str | None:
        """Id of the application or pod this item launches."""
        if self.application is not None:
            return self.application.id
        if self.pod is not None:
            return self.pod.id
        return None


class Queue(MarathonModel):
    """Content of the Marathon launch queue."""

    items: list[QueueItem] = pydantic.Field(default_factory=list, alias="queue")
