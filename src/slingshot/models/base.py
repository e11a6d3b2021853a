"""
Base model for Slingshot data structures.

All API-facing records derive from :class:`BaseSlingshotModel` so they share
one Pydantic v2 configuration and serialize dates the same way.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseSlingshotModel(BaseModel):
    """
    Base model for all Slingshot data structures.

    Provides consistent configuration and JSON serialization for records
    returned by the HTTP facade.
    """

    model_config = ConfigDict(
        # Enable validation on assignment
        validate_assignment=True,
        # Use enum values instead of names in serialization
        use_enum_values=True,
        # Provider payloads carry many fields we do not model
        extra="ignore",
        # Validate default values
        validate_default=True,
        # Accept snake_case field names when an alias is declared
        populate_by_name=True,
    )

    def to_response(self) -> dict[str, Any]:
        """Serialize for the response envelope using camelCase aliases."""
        return self.model_dump(mode="json", by_alias=True)
