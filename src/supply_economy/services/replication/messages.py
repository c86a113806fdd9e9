"""
Wire messages exchanged between the authority and its replicas.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Literal, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class EconomyMessage(BaseModel):
    """Base model for all replication messages."""

    message_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sender_id: str
    kind: str

    model_config = ConfigDict(frozen=True)


class RequestSnapshot(EconomyMessage):
    """Replica -> authority: please broadcast the full state."""

    kind: Literal["request_snapshot"] = "request_snapshot"


class Snapshot(EconomyMessage):
    """Authority -> all: the full economy state at a version."""

    kind: Literal["snapshot"] = "snapshot"
    version: int = Field(..., ge=0)
    state: Dict[str, Any]


class SupplyDelta(EconomyMessage):
    """Authority -> all: a signed supply change produced by mutation `version`."""

    kind: Literal["supply_delta"] = "supply_delta"
    item_id: str
    amount: int
    version: int = Field(..., ge=1)


AnyMessage = Union[RequestSnapshot, Snapshot, SupplyDelta]

_message_adapter: TypeAdapter[AnyMessage] = TypeAdapter(
    Annotated[Union[RequestSnapshot, Snapshot, SupplyDelta], Field(discriminator="kind")]
)


def parse_message(data: Union[str, bytes, Dict[str, Any]]) -> AnyMessage:
    """Decode a message from JSON text or a dict; raises pydantic.ValidationError."""
    if isinstance(data, (str, bytes)):
        return _message_adapter.validate_json(data)
    return _message_adapter.validate_python(data)
