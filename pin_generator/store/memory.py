"""In-process PIN store, used for local runs and tests."""
import random
from typing import Dict, Any, List, Optional, Tuple
from pin_generator.errors import StoreError
from pin_generator.models import (
    PIN_FIELD,
    STATE_FIELD,
    ID_FIELD,
    PinState,
    pin_state,
)
from pin_generator.store.base import PinStore


class InMemoryPinStore(PinStore):
    """Keeps PIN records in a dict keyed by code."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.records: Dict[str, Dict[str, Any]] = {}
        self.rng = rng or random.Random()
        self._next_id = 1
        # operation name -> StoreError to raise on the next call
        self.failures: Dict[str, StoreError] = {}
        self.calls: List[str] = []

    def fail_next(self, operation: str, error: Optional[StoreError] = None):
        """Make the next call to `operation` raise a StoreError."""
        self.failures[operation] = error or StoreError(f"{operation} failed", code="TEST")

    def _enter(self, operation: str):
        self.calls.append(operation)
        error = self.failures.pop(operation, None)
        if error is not None:
            raise error

    async def select_all(self) -> Tuple[List[Dict[str, Any]], int]:
        self._enter("select_all")
        pins = [dict(record) for record in self.records.values()]
        return pins, len(pins)

    async def bulk_insert(self, pins: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self._enter("bulk_insert")
        for pin in pins:
            if pin[PIN_FIELD] in self.records:
                raise StoreError(
                    f'duplicate key value violates unique constraint "{PIN_FIELD}"',
                    details=f"Key ({PIN_FIELD})=({pin[PIN_FIELD]}) already exists.",
                    code="23505",
                )
        inserted = []
        for pin in pins:
            record = {
                ID_FIELD: self._next_id,
                PIN_FIELD: pin[PIN_FIELD],
                STATE_FIELD: pin_state(pin),
            }
            self._next_id += 1
            self.records[record[PIN_FIELD]] = record
            inserted.append(dict(record))
        return inserted

    async def bulk_upsert(self, pins: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self._enter("bulk_upsert")
        updated = []
        for pin in pins:
            record = self.records.get(pin[PIN_FIELD])
            if record is None:
                record = {ID_FIELD: self._next_id, PIN_FIELD: pin[PIN_FIELD]}
                self._next_id += 1
                self.records[pin[PIN_FIELD]] = record
            record[STATE_FIELD] = pin_state(pin)
            updated.append(dict(record))
        return updated

    async def select_random_unallocated(self, quantity: int) -> List[Dict[str, Any]]:
        self._enter("select_random_unallocated")
        available = [
            record for record in self.records.values()
            if pin_state(record) == PinState.UNALLOCATED
        ]
        chosen = self.rng.sample(available, min(quantity, len(available)))
        for record in chosen:
            record[STATE_FIELD] = PinState.ALLOCATED
        return [dict(record) for record in chosen]

    async def reset_allocation(self) -> None:
        self._enter("reset_allocation")
        for record in self.records.values():
            if pin_state(record) == PinState.ALLOCATED:
                record[STATE_FIELD] = PinState.UNALLOCATED

    def count_by_state(self) -> Dict[PinState, int]:
        counts = {state: 0 for state in PinState}
        for record in self.records.values():
            counts[pin_state(record)] += 1
        return counts
