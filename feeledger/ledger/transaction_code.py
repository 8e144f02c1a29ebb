"""
Transaction code generation.
Format: prefix + receipt date (YYMMDD) + process-wide sequence + 2 random alphanumeric.
"""

import itertools
import secrets
import string
from datetime import date
from typing import Optional

# Codes are stored in String(40) columns: prefix + "-YYMMDD-" + 5 digits + 2 chars.
MAX_PREFIX_LENGTH = 20


class TransactionCodeGenerator:
    """
    Generate human-legible, globally unique transaction codes.

    Rules:
    - Configured prefix (default UBA-PY).
    - Receipt date as YYMMDD.
    - 5-digit sequence shared by every generator in the process, so two codes from
      the same process never collide.
    - 2 random uppercase alphanumeric (A-Z, 0-9) to separate processes.

    Examples:
        UBA-PY-261019-00001K7
        UBA-PY-261019-00002Q9
    """

    _sequence = itertools.count(1)
    _alphabet = string.ascii_uppercase + string.digits

    def __init__(self, prefix: str = "UBA-PY") -> None:
        self.prefix = prefix.strip().upper() or "UBA-PY"
        if len(self.prefix) > MAX_PREFIX_LENGTH:
            raise ValueError(f"Transaction code prefix is longer than {MAX_PREFIX_LENGTH} characters")

    def next_code(self, on: Optional[date] = None) -> str:
        on = on or date.today()
        seq = next(self._sequence)
        random_part = "".join(secrets.choice(self._alphabet) for _ in range(2))
        return f"{self.prefix}-{on:%y%m%d}-{seq:05d}{random_part}"
