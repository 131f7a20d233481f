"""
Health repository.
Provides database health check functionality.
"""

from phonebook.db.storage import StorageEngine


class HealthRepository:
    """Repository for health check operations."""

    def __init__(self, storage: StorageEngine):
        self.storage = storage

    async def check_database(self) -> bool:
        """
        Check database connectivity.

        Returns:
            True if database is accessible, False otherwise
        """
        if not self.storage.is_connected:
            return False
        return await self.storage.ping()
