"""Interface of the store that holds PIN allocation state."""
from typing import Dict, Any, List, Tuple


class PinStore:
    """
    Persistent (code, state) records plus the two stored operations.

    Every method is a coroutine and raises StoreError when the round-trip
    fails. Random selection must mark the returned records Allocated in the
    same atomic step so two sessions never receive the same code.
    """

    async def start(self):
        """Open any connection the store needs."""

    async def stop(self):
        """Release the connection."""

    async def select_all(self) -> Tuple[List[Dict[str, Any]], int]:
        """Return all PIN records and the total count."""
        raise NotImplementedError

    async def bulk_insert(self, pins: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert new PIN records and return them with their ids."""
        raise NotImplementedError

    async def bulk_upsert(self, pins: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Update existing PIN records, matched on their code."""
        raise NotImplementedError

    async def select_random_unallocated(self, quantity: int) -> List[Dict[str, Any]]:
        """Return up to `quantity` random unallocated records, now marked Allocated."""
        raise NotImplementedError

    async def reset_allocation(self) -> None:
        """Flip every Allocated record back to Unallocated."""
        raise NotImplementedError
