"""
Content fingerprints for snapshot deduplication.

Only answers "is this content identical to a stored snapshot?".
Not a tamper-detection mechanism.
"""

import hashlib
from typing import Union


def fingerprint(data: Union[bytes, str]) -> str:
    """SHA256 hex digest of raw content (str is UTF-8 encoded)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()
