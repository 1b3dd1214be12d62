"""Create, update, delete and status-toggle operations."""

import asyncio
import logging
from typing import Any

from hla.api.client import LeagueAPIClient
from hla.api.resources import ResourceSpec, get_resource
from hla.cache.query import QueryCache
from hla.core.constants import NATIONAL_TEAM_LABEL, EntityType
from hla.exceptions import APIError, ValidationError
from hla.models.mutation import MutationIntent, MutationKind
from hla.models.payloads import WritePayload
from hla.services.notifications import Notification, NotificationLevel, Notifier
from hla.services.optimistic import OptimisticPatch, row_updater

logger = logging.getLogger(__name__)

PAST_TENSE = {
    MutationKind.CREATE: "created",
    MutationKind.UPDATE: "updated",
    MutationKind.DELETE: "deleted",
}

VERBS = {
    MutationKind.CREATE: "create",
    MutationKind.UPDATE: "update",
    MutationKind.DELETE: "delete",
    MutationKind.TOGGLE_STATUS: "update",
}


def payload_display_name(payload: WritePayload) -> str | None:
    """Best human label for a row described by a write payload."""
    data = payload.model_dump()
    if "name" in data:
        return data["name"] or NATIONAL_TEAM_LABEL
    if data.get("display_name"):
        return data["display_name"]
    if data.get("year") is not None:
        return str(data["year"])
    return None


class MutationDispatcher:
    """Runs mutations against the backend and keeps the query cache in step.

    Create, update and delete invalidate every cached page of the entity on
    success, since row membership and counts may have changed. Toggling a
    status flag patches the cached rows optimistically and rolls the patch
    back if the backend rejects it.
    """

    def __init__(self, client: LeagueAPIClient, cache: QueryCache, notifier: Notifier) -> None:
        self.client = client
        self.cache = cache
        self.notifier = notifier

    async def dispatch(self, intent: MutationIntent, token: str | None = None) -> Any:
        """Perform ``intent``.

        Returns:
            The new id for create, the backend response body otherwise

        Raises:
            ValidationError: The entity does not support the operation
            APIError: Any transport, status or decode failure, after an error
                notification. A failed status toggle is rolled back first,
                whatever the exception.
        """
        resource = get_resource(intent.entity)
        if intent.operation is MutationKind.TOGGLE_STATUS:
            return await self._toggle(resource, intent, token)

        self._check_supported(resource, intent.operation)
        name = intent.display_name
        if name is None and isinstance(intent.payload, WritePayload):
            name = payload_display_name(intent.payload)

        try:
            result = await asyncio.to_thread(self._call, resource, intent, token)
        except APIError as e:
            self._fail(resource, intent.operation, e)
            raise

        self.cache.invalidate(resource.entity)
        self._succeed(self._success_message(resource, intent.operation, name))
        return result

    def _call(self, resource: ResourceSpec, intent: MutationIntent, token: str | None) -> Any:
        if intent.operation is MutationKind.CREATE:
            return self.client.create(resource.path, intent.request_body(), token)
        if intent.operation is MutationKind.UPDATE:
            return self.client.update(resource.path, intent.target_id, intent.request_body(), token)  # type: ignore[arg-type]
        return self.client.delete(resource.path, intent.target_id, token)  # type: ignore[arg-type]

    async def _toggle(self, resource: ResourceSpec, intent: MutationIntent, token: str | None) -> Any:
        if resource.toggle_field is None:
            raise ValidationError("entity", resource.entity.value, f"{resource.label} has no status to toggle")

        value = bool(intent.payload)
        target_id: int = intent.target_id  # type: ignore[assignment]
        patch = OptimisticPatch(self.cache, resource.entity, row_updater(target_id, {resource.toggle_field: value}))
        patch.apply()
        name = intent.display_name or self._cached_name(patch, target_id)

        try:
            result = await asyncio.to_thread(self.client.patch_status, resource.path, target_id, value, token)
        except asyncio.CancelledError:
            patch.rollback()
            raise
        except Exception as e:
            patch.rollback()
            self._fail(resource, intent.operation, e)
            raise

        patch.confirm()
        state = "enabled" if value else "disabled"
        subject = f'{resource.label} "{name}"' if name else resource.label
        self._succeed(f"{subject} {state} successfully")
        return result

    @staticmethod
    def _cached_name(patch: OptimisticPatch, row_id: int) -> str | None:
        for page in patch.snapshot.values():
            for item in page.items:
                if item.id == row_id:
                    return item.display_name
        return None

    @staticmethod
    def _check_supported(resource: ResourceSpec, operation: MutationKind) -> None:
        supported = {
            MutationKind.CREATE: resource.create_model is not None,
            MutationKind.UPDATE: resource.update_model is not None,
            MutationKind.DELETE: resource.deletable,
        }
        if not supported[operation]:
            raise ValidationError(
                "entity", resource.entity.value, f"{resource.label} rows cannot be {PAST_TENSE[operation]}"
            )

    @staticmethod
    def _success_message(resource: ResourceSpec, operation: MutationKind, name: str | None) -> str:
        subject = f'{resource.label} "{name}"' if name else resource.label
        return f"{subject} {PAST_TENSE[operation]} successfully"

    def _succeed(self, message: str) -> None:
        logger.info(message)
        self.notifier.notify(Notification(NotificationLevel.SUCCESS, message))

    def _fail(self, resource: ResourceSpec, operation: MutationKind, error: Exception) -> None:
        reason = error.message if isinstance(error, APIError) else repr(error)
        logger.warning(f"{operation} {resource.entity} failed: {reason}")
        subject = resource.label.lower()
        if operation is MutationKind.TOGGLE_STATUS:
            subject = f"{subject} status"
        message = f"Failed to {VERBS[operation]} {subject}. Please try again."
        self.notifier.notify(Notification(NotificationLevel.ERROR, message))

    # Convenience wrappers

    async def create(self, entity: EntityType | str, payload: WritePayload, token: str | None = None) -> Any:
        intent = MutationIntent(operation=MutationKind.CREATE, entity=EntityType(entity), payload=payload)
        return await self.dispatch(intent, token)

    async def update(
        self,
        entity: EntityType | str,
        target_id: int,
        payload: WritePayload,
        token: str | None = None,
        display_name: str | None = None,
    ) -> Any:
        intent = MutationIntent(
            operation=MutationKind.UPDATE,
            entity=EntityType(entity),
            target_id=target_id,
            payload=payload,
            display_name=display_name,
        )
        return await self.dispatch(intent, token)

    async def delete(
        self, entity: EntityType | str, target_id: int, token: str | None = None, display_name: str | None = None
    ) -> Any:
        intent = MutationIntent(
            operation=MutationKind.DELETE, entity=EntityType(entity), target_id=target_id, display_name=display_name
        )
        return await self.dispatch(intent, token)

    async def toggle_status(
        self,
        entity: EntityType | str,
        target_id: int,
        value: bool,
        token: str | None = None,
        display_name: str | None = None,
    ) -> Any:
        intent = MutationIntent(
            operation=MutationKind.TOGGLE_STATUS,
            entity=EntityType(entity),
            target_id=target_id,
            payload=value,
            display_name=display_name,
        )
        return await self.dispatch(intent, token)
