"""Repository interface for distributed crawl locks.

Locks are keyed by ``"crawl:" + normalized_key`` and carry an owner id and
an expiry. "Already held" is an expected outcome, never an error.
"""

from abc import ABC, abstractmethod
from typing import Optional


def crawl_lock_key(normalized_key: str) -> str:
    """Build the lock key guarding the crawl of a normalized place name."""
    return f"crawl:{normalized_key}"


class CrawlLockRepository(ABC):
    """Repository interface for crawl mutual exclusion."""

    @abstractmethod
    async def acquire_lock(self, lock_key: str, owner_id: str) -> bool:
        """
        Try to take the lock without blocking.

        Parameters
        ----------
        lock_key
            Lock identifier (e.g. "crawl:강남스타벅스")
        owner_id
            Request id of the caller

        Returns
        -------
        True if the caller now holds the lock, False if someone else does
        """

    @abstractmethod
    async def release_lock(self, lock_key: str, owner_id: Optional[str] = None) -> None:
        """
        Release the lock. Idempotent.

        When ``owner_id`` is given, only a lock held by that owner is
        released; a lock held by someone else is left untouched.
        """

    @abstractmethod
    async def wait_for_lock_release(self, lock_key: str) -> bool:
        """
        Wait (bounded) for the lock to disappear.

        Returns
        -------
        True if the lock was released or expired, False on timeout
        """

    @abstractmethod
    async def is_locked(self, lock_key: str) -> bool:
        """Non-blocking advisory check."""

    @abstractmethod
    async def cleanup_expired_locks(self) -> int:
        """
        Delete locks past their expiry.

        Returns
        -------
        Number of locks deleted
        """
