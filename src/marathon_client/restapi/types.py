"""Shared types for Marathon REST API models.

Pydantic base model used by every wire record plus the two string types whose
JSON shape depends on the Marathon version that produced the response.
"""

from datetime import datetime
from typing import Annotated, Any

import pydantic
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError


class MarathonModel(pydantic.BaseModel):
    """Base class for Marathon API records.

    Field names are snake_case in Python and camelCase on the wire. Unknown
    fields are kept so a decoded response can be re-encoded without loss.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Encode the record back into its JSON wire representation.

        Only fields present in the decoded document are emitted, so an absent
        field stays absent and an explicit ``null`` stays ``null``.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


def parse_timestamp(value: str) -> datetime:
    """Parse a Marathon ISO-8601 timestamp into an aware datetime.

    Accepts any number of fractional-second digits and a trailing "Z",
    which requires Python 3.11 or later.
    """
    return datetime.fromisoformat(value)


def _unwrap(wrapper_key: str):
    """Build a validator accepting ``"value"`` or ``{wrapper_key: "value"}``."""

    def validate(value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, dict):
            # Older servers omit the key entirely for empty values
            wrapped = value.get(wrapper_key, "")
            if isinstance(wrapped, str):
                return wrapped
        raise PydanticCustomError(
            "malformed_value",
            "expected a string or an object with a string '{wrapper_key}' field",
            {"wrapper_key": wrapper_key},
        )

    return validate


# Pod instance identifier: "a.b.c" or {"idString": "a.b.c"}
InstanceID = Annotated[str, pydantic.BeforeValidator(_unwrap("idString"))]

# Task condition: "running" or {"str": "running"}
TaskCondition = Annotated[str, pydantic.BeforeValidator(_unwrap("str"))]
