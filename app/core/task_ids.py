"""
Shape checks for caller-chosen taskIds.

A taskId is a slugid: a v4 UUID encoded as unpadded URL-safe base64, 22
characters from ``[A-Za-z0-9_-]``. Callers generate them (see the ``slugid``
package); the queue only checks the shape.
"""

import re

# Fixed positions carry the UUID version (4) and variant (10xx) bits.
SLUGID_PATTERN = r"^[A-Za-z0-9_-]{8}[Q-T][A-Za-z0-9_-][CGKOSWaeimquy26-][A-Za-z0-9_-]{10}[AQgw]$"

_SLUGID_RE = re.compile(SLUGID_PATTERN)


def is_slugid(value: str) -> bool:
    return isinstance(value, str) and _SLUGID_RE.fullmatch(value) is not None
