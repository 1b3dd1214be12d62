"""Mutation intent model."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from hla.core.constants import EntityType
from hla.models.payloads import WritePayload


class MutationKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    TOGGLE_STATUS = "toggle-status"


class MutationIntent(BaseModel):
    """A user-submitted change, alive only for the duration of its request.

    ``payload`` is a validated write payload for create/update and the new
    boolean value for toggle-status. ``display_name`` names the affected
    row in notifications.
    """

    model_config = ConfigDict(frozen=True)

    operation: MutationKind
    entity: EntityType
    target_id: int | None = None
    payload: WritePayload | bool | None = None
    display_name: str | None = None

    @model_validator(mode="after")
    def check_shape(self) -> "MutationIntent":
        if self.operation is not MutationKind.CREATE and self.target_id is None:
            raise ValueError(f"{self.operation} requires a target id")
        if self.operation in (MutationKind.CREATE, MutationKind.UPDATE) and not isinstance(
            self.payload, WritePayload
        ):
            raise ValueError(f"{self.operation} requires a write payload")
        if self.operation is MutationKind.TOGGLE_STATUS and not isinstance(self.payload, bool):
            raise ValueError("toggle-status requires a boolean payload")
        return self

    def request_body(self) -> Any:
        if isinstance(self.payload, WritePayload):
            return self.payload.to_request_body()
        return self.payload
