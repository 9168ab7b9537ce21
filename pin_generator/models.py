"""PIN record model shared by the store and the allocation logic."""
from enum import IntEnum
from typing import Dict, Any, Optional


PIN_FIELD = "PIN"
STATE_FIELD = "State"
ID_FIELD = "id"


class PinState(IntEnum):
    """Allocation state of a PIN, stored as an integer column."""
    UNALLOCATED = 0
    ALLOCATED = 1
    NOT_ALLOWED = 2


def make_pin(code: str, state: PinState = PinState.UNALLOCATED, pin_id: Optional[Any] = None) -> Dict[str, Any]:
    """Build a PIN record. The id is left out until the store assigns one."""
    record: Dict[str, Any] = {PIN_FIELD: code, STATE_FIELD: state}
    if pin_id is not None:
        record[ID_FIELD] = pin_id
    return record


def pin_state(record: Dict[str, Any]) -> PinState:
    """Read the state of a record coming back from a store."""
    return PinState(int(record.get(STATE_FIELD, PinState.UNALLOCATED)))


def pin_code(record: Dict[str, Any]) -> str:
    return record[PIN_FIELD]
