"""Shared base for all document models.

Python attributes are snake_case; store documents use camelCase keys
(``teamId``, ``scheduledTime``) so records round-trip unchanged through
the remote store.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base model with camelCase aliases and document export."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-compatible camelCase document for the store."""
        return self.model_dump(mode="json", by_alias=True)
