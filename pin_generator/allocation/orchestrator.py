"""PIN allocation: store bootstrap, one-time classification and rollover."""
from typing import Dict, Any, List, Optional
from pin_generator.errors import CapacityExceeded, InvalidPinRequest, SetupIncomplete
from pin_generator.models import PinState, STATE_FIELD, pin_code, pin_state
from pin_generator.store.base import PinStore
from pin_generator.utils.pin_rules import generate_universe, is_allowed


class AllocationOrchestrator:
    """Sets up the PIN store once per session and serves random PINs from it."""
    
    def __init__(self, store: PinStore, max_rollovers: int = 10):
        self.store = store
        self.max_rollovers = max_rollovers
        self.is_setup_complete = False
        self.allowed_pool_size: Optional[int] = None
        self.rollover_count = 0
    
    async def setup(self):
        """
        Run the initial setup for the PIN store.
        
        If the store is empty, every PIN from 0000-9999 is created. If no PIN
        is flagged NotAllowed yet, the unsuitable PINs are flagged. Only the
        first run pays for this; later sessions just read the records.
        """
        pins, count = await self.store.select_all()
        
        if count == 0:
            pins = await self._create_universe()
        
        if not self.not_allowed_has_been_marked(pins):
            invalid_pins = self.generate_invalid_pins(pins)
            print(f"🔧 Flagging {len(invalid_pins)} PINs as NotAllowed")
            await self.store.bulk_upsert(invalid_pins)
        
        self.allowed_pool_size = sum(1 for pin in pins if pin_state(pin) != PinState.NOT_ALLOWED)
        self.is_setup_complete = True
        print(f"✅ PIN store ready: {len(pins)} PINs, {self.allowed_pool_size} allowed")
    
    async def _create_universe(self) -> List[Dict[str, Any]]:
        """Create every PIN and add them to the store."""
        new_pins = generate_universe()
        print(f"🔧 Store is empty, adding {len(new_pins)} PINs")
        inserted = await self.store.bulk_insert(new_pins)
        # Prefer the store's copy so upserts carry the assigned ids
        if len(inserted) == len(new_pins):
            return inserted
        return new_pins
    
    @staticmethod
    def not_allowed_has_been_marked(pins: List[Dict[str, Any]]) -> bool:
        """Whether any of the given PINs is already marked NotAllowed."""
        return any(pin_state(pin) == PinState.NOT_ALLOWED for pin in pins)
    
    @staticmethod
    def generate_invalid_pins(pins: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Mark the PINs that must never be handed out.
        
        Args:
            pins: The PIN records to check; matching records are updated in place
        
        Returns:
            The records that were marked NotAllowed
        """
        invalid_pins = [pin for pin in pins if not is_allowed(pin_code(pin))]
        for pin in invalid_pins:
            pin[STATE_FIELD] = PinState.NOT_ALLOWED
        return invalid_pins
    
    async def request_pins(self, requested: int) -> List[str]:
        """
        Allocate `requested` random PINs.
        
        When the store runs out of unallocated PINs, all allocated PINs are
        released (rollover) and the remainder is requested again. Codes in
        the returned list are distinct.
        
        Raises:
            InvalidPinRequest: requested is not a positive integer
            CapacityExceeded: more PINs than the allowed pool, or rollover stalled
            SetupIncomplete: setup() has not finished
            StoreError: any failed store call, unchanged
        """
        if isinstance(requested, bool) or not isinstance(requested, int) or requested <= 0:
            raise InvalidPinRequest(f"Number of PINs must be a positive integer, got {requested!r}")
        if not self.is_setup_complete:
            raise SetupIncomplete("PIN store setup has not completed")
        if requested > self.allowed_pool_size:
            raise CapacityExceeded(requested, self.allowed_pool_size)
        
        generated: List[str] = []
        seen = set()
        rollovers = 0
        after_rollover = False
        rounds = 0
        # Each rollover period serves at most `requested` new and `requested` repeated codes
        max_rounds = 2 * requested * (self.max_rollovers + 1)
        
        while len(generated) < requested:
            if rounds >= max_rounds:
                raise CapacityExceeded(
                    requested,
                    len(generated),
                    f"Gave up after {rounds} store rounds with {len(generated)} of {requested} PINs",
                )
            rounds += 1
            remaining = requested - len(generated)
            received = await self.store.select_random_unallocated(remaining)
            
            for pin in received:
                code = pin_code(pin)
                if code not in seen:
                    seen.add(code)
                    generated.append(code)
            
            if len(received) >= remaining:
                after_rollover = False
                continue
            
            if after_rollover and not received:
                raise CapacityExceeded(
                    requested,
                    len(generated),
                    "No unallocated PINs left after rollover",
                )
            if rollovers >= self.max_rollovers:
                raise CapacityExceeded(
                    requested,
                    len(generated),
                    f"Gave up after {rollovers} rollovers with {len(generated)} of {requested} PINs",
                )
            
            await self.rollover_pin_allocation(requested - len(generated))
            rollovers += 1
            after_rollover = True
        
        return generated
    
    async def rollover_pin_allocation(self, remaining: int):
        """Release every allocated PIN so the rest of a request can be served."""
        print(f"🔁 Unallocated PINs exhausted, rolling over to serve {remaining} more")
        await self.store.reset_allocation()
        self.rollover_count += 1
    
    async def summarize(self) -> Dict[str, int]:
        """Count the stored PINs per state."""
        pins, count = await self.store.select_all()
        summary = {state.name.lower(): 0 for state in PinState}
        for pin in pins:
            summary[pin_state(pin).name.lower()] += 1
        summary["total"] = count
        return summary
