"""
Base service class.
Services hold business rules and coordinate repositories and integrations.
"""

from abc import ABC


class BaseService(ABC):
    """Base class for all services."""
    pass
