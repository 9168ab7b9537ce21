"""PIN suitability rules and the fixed universe of 4-digit codes.

Some of these choices are influenced by the analysis at
https://www.datagenetics.com/blog/september32012/
"""
import re
from typing import Dict, Any, List
from pin_generator.models import PinState, make_pin

PIN_LENGTH = 4
UNIVERSE_SIZE = 10 ** PIN_LENGTH

ALLOWED = "Allowed"
NOT_ALLOWED = "NotAllowed"

# Years 1900-2029, a repeated 2 digit pair (2727) or 0000-0009.
# Only the first and last alternatives are anchored; matched with search().
YEAR_OR_DEGENERATE = re.compile(r"^(19\d\d)|(200\d)|(201\d)|(202\d)|(\d\d)\5{1,}|(000\d)$")

_CODE_FORMAT = re.compile(r"[0-9]{4}")


def _validate(code: str):
    if not isinstance(code, str) or not _CODE_FORMAT.fullmatch(code):
        raise ValueError(f"PIN must be exactly {PIN_LENGTH} digits: {code!r}")


def _digits(code: str) -> List[int]:
    return [int(c) for c in code]


def is_paired_doubles(code: str) -> bool:
    """Two sets of the same 2 values, e.g. 5544."""
    d = _digits(code)
    return d[0] == d[1] and d[2] == d[3]


def is_ascending_run(code: str) -> bool:
    """e.g. 1234"""
    d = _digits(code)
    return all(d[i] == d[0] + i for i in range(1, PIN_LENGTH))


def is_descending_run(code: str) -> bool:
    """e.g. 4321"""
    d = _digits(code)
    return all(d[i] == d[0] - i for i in range(1, PIN_LENGTH))


def is_palindrome(code: str) -> bool:
    """e.g. 4334"""
    return code == code[::-1]


def is_year_or_degenerate(code: str) -> bool:
    """Likely birth year, repeating pair (2727) or 0001-0009."""
    return YEAR_OR_DEGENERATE.search(code) is not None


RULES = {
    "paired_doubles": is_paired_doubles,
    "ascending_run": is_ascending_run,
    "descending_run": is_descending_run,
    "palindrome": is_palindrome,
    "year_or_degenerate": is_year_or_degenerate,
}


def classify_reasons(code: str) -> List[str]:
    """Return the names of every rule the code breaks (empty when allowed)."""
    _validate(code)
    return [name for name, rule in RULES.items() if rule(code)]


def classify(code: str) -> str:
    """Return ALLOWED or NOT_ALLOWED for a 4-digit code."""
    return NOT_ALLOWED if classify_reasons(code) else ALLOWED


def is_allowed(code: str) -> bool:
    return classify(code) == ALLOWED


def generate_universe() -> List[Dict[str, Any]]:
    """
    Generate every PIN from 0000 to 9999.

    Returns:
        A list of 10,000 unallocated PIN records in ascending order
    """
    return [make_pin(f"{number:04d}", PinState.UNALLOCATED) for number in range(UNIVERSE_SIZE)]
