"""
Base controller class.
Controllers coordinate services and return Pydantic schemas to the endpoints.
"""

from abc import ABC


class BaseController(ABC):
    """Base class for all controllers."""
    pass
