"""
Serving package: FastAPI application factory and error taxonomy.
"""

from .api import create_app
from .errors import ApiError, InternalError, NotFoundError, ValidationError

__all__ = ["ApiError", "InternalError", "NotFoundError", "ValidationError", "create_app"]
