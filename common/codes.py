"""Short codes printed on QR labels.

A code is four letters followed by four digits (``ABCD1234``). ``O`` and ``I``
are excluded from the letter alphabet because they read as ``0`` and ``1`` on
printed labels. Labels encode a portal URL ending in ``/p/<code>``.
"""

import re
import secrets
from typing import Iterable

LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"
DIGITS = "0123456789"
SHORT_CODE_RE = re.compile(r"^[A-Z]{4}\d{4}$")
DEFAULT_MAX_ATTEMPTS = 100


class CodeGenerationError(Exception):
    """Raised when no unique code could be produced within the attempt budget."""


def generate_short_code() -> str:
    letters = "".join(secrets.choice(LETTERS) for _ in range(4))
    digits = "".join(secrets.choice(DIGITS) for _ in range(4))
    return f"{letters}{digits}"


def is_valid_short_code(code: str) -> bool:
    if not code or not SHORT_CODE_RE.match(code):
        return False
    return "O" not in code and "I" not in code


def format_short_code(code: str) -> str:
    """Format for display: ``ABCD1234`` -> ``ABCD-1234``."""
    if len(code) != 8:
        return code
    return f"{code[:4]}-{code[4:]}"


def parse_short_code(text: str) -> str:
    """Normalize user input: uppercase, strip dashes and whitespace."""
    return re.sub(r"[\s-]", "", text or "").upper()


def extract_product_code(scanned: str) -> str:
    """Return the code from a raw scan, which may be a full ``.../p/<code>`` URL."""
    scanned = (scanned or "").strip()
    if "/p/" in scanned:
        scanned = scanned.split("/p/")[-1]
    scanned = scanned.split("?")[0].strip("/")
    return parse_short_code(scanned)


def generate_unique_short_code(existing: set, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> str:
    """Generate a code not present in ``existing``; the new code is added to it."""
    for _ in range(max_attempts):
        code = generate_short_code()
        if code not in existing:
            existing.add(code)
            return code
    raise CodeGenerationError(f"Failed to generate unique short code after {max_attempts} attempts")


def generate_unique_codes(
    count: int, existing: Iterable[str] = (), max_attempts: int = DEFAULT_MAX_ATTEMPTS
) -> list[str]:
    """Generate ``count`` codes unique within the batch and disjoint from ``existing``.

    Each slot has its own attempt budget; exhausting any slot fails the batch.
    """
    taken = set(existing)
    return [generate_unique_short_code(taken, max_attempts=max_attempts) for _ in range(count)]
