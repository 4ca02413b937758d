"""
Base Models for API Request/Response Validation

The API speaks camelCase JSON while Python code uses snake_case
attributes. Every model here carries a camelCase alias generator and
accepts either spelling on input.

Usage:
    # For request bodies
    class SaveProgressRequest(StrictRequest):
        session_id: str           # wire name: sessionId
        current_index: int        # wire name: currentIndex

    # For response bodies (allows extra fields from DB)
    class SessionSummary(StrictResponse):
        id: str
        created_at: datetime      # wire name: createdAt

Architecture:
    API Request → StrictRequest (extra="forbid") → Route Handler
    DB Model → StrictResponse (extra="ignore") → API Response
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StrictRequest(BaseModel):
    """
    Base model for API request bodies with strict validation.

    Features:
        - extra="forbid": Unknown fields raise 422 Unprocessable Entity
        - str_strip_whitespace=True: Trims whitespace from strings
        - camelCase aliases, snake_case accepted too
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class StrictResponse(BaseModel):
    """
    Base model for API response bodies.

    Ignores extra attributes so ORM rows can be validated directly.
    Serialized with camelCase aliases by FastAPI.
    """

    model_config = ConfigDict(
        extra="ignore",
        validate_default=True,
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class APIModel(BaseModel):
    """
    Base model for objects that travel in both directions, like
    generated flashcards and questions that the client posts back
    when requesting results.
    """

    model_config = ConfigDict(
        extra="forbid",
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Common Response Patterns
# =============================================================================


class SuccessResponse(StrictResponse):
    """Simple success response for operations without complex output."""

    success: bool = True
    message: str
