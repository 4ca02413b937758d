"""
Pydantic models for API requests and responses.

- base.py: StrictRequest / StrictResponse with camelCase aliases
- learning.py: Topic generation, results, save-for-later, sessions
- digest.py: Weekly digests, batch results, preferences
- auth.py: Registration, login, profile
"""

from learnloop.models.base import APIModel, StrictRequest, StrictResponse, SuccessResponse

__all__ = ["APIModel", "StrictRequest", "StrictResponse", "SuccessResponse"]
