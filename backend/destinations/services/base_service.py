"""
Base Service

Shared optimistic-concurrency update flow for resource services.
"""

from typing import Any, Awaitable, Callable, Dict, Optional, Type

from pydantic import BaseModel, ValidationError

from destinations.core.exceptions import (
    BaseApplicationException,
    PreconditionFailedException,
    ValidationException,
)
from destinations.repositories.base_repository import BaseRepository
from destinations.schemas.common import format_validation_errors
from destinations.utils.etag import compute_fingerprint, matches_precondition
from destinations.utils.logger import get_logger

logger = get_logger(__name__)

ChangeCheck = Callable[[Dict[str, Any]], Awaitable[None]]


def validate_changes(schema: Type[BaseModel], payload: Any) -> Dict[str, Any]:
    """
    Validate a partial update body against ``schema``.

    Returns:
        Dict[str, Any]: Only the fields the client supplied, JSON-ready

    Raises:
        ValidationException: If the body is not a valid partial resource
    """
    try:
        changes = schema.model_validate(payload)
    except ValidationError as e:
        raise ValidationException(
            "Invalid request data",
            field_errors=format_validation_errors(e.errors()),
        ) from e
    return changes.model_dump(mode="json", exclude_unset=True)


class BaseService:
    """Common behaviour for services backed by a repository."""

    resource_type: str = "Resource"

    async def _conditional_update(
        self,
        repository: BaseRepository,
        resource_id: str,
        payload: Any,
        schema: Type[BaseModel],
        if_match: Optional[str],
        not_found: Callable[[str], BaseApplicationException],
        check_changes: Optional[ChangeCheck] = None,
    ) -> Dict[str, Any]:
        """
        Apply a partial update to a row, honouring an optional If-Match token.

        Checks run in this order: the row must exist (404), a supplied token
        must match the current fingerprint (412), then the body is validated
        (400). With a token the write is also guarded by the snapshot that
        was fingerprinted, so a concurrent change between check and write is
        rejected the same way. Without a token the update is unconditional.

        Args:
            payload: Raw request body
            schema: Partial update schema the body is validated against
            check_changes: Extra validation run on the cleaned changes
                before anything is written

        Returns:
            Dict[str, Any]: The stored representation after the update
        """
        current = await repository.get_by_id(resource_id)
        if current is None:
            raise not_found(resource_id)

        snapshot = current.to_dict()
        current_etag = compute_fingerprint(snapshot)

        if if_match is not None and not matches_precondition(if_match, current_etag):
            logger.info(
                "Stale If-Match rejected",
                resource_type=self.resource_type,
                resource_id=resource_id,
            )
            raise PreconditionFailedException(self.resource_type, resource_id, current_etag)

        changes = validate_changes(schema, payload)
        if check_changes is not None:
            await check_changes(changes)

        if changes:
            expected = None
            if if_match is not None:
                expected = {key: value for key, value in snapshot.items() if key != "id"}

            applied = await repository.update(resource_id, changes, expected=expected)
            if not applied:
                if not await repository.exists(resource_id):
                    raise not_found(resource_id)
                logger.info(
                    "Concurrent modification detected",
                    resource_type=self.resource_type,
                    resource_id=resource_id,
                )
                raise PreconditionFailedException(self.resource_type, resource_id)

        updated = await repository.get_by_id(resource_id)
        if updated is None:
            raise not_found(resource_id)
        return updated.to_dict()
