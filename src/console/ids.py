# src/console/ids.py
"""Idempotency tokens for mutating requests."""

from __future__ import annotations

import random
import uuid

import structlog

logger = structlog.get_logger()

_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"

# Only used when the OS entropy source is missing.
_fallback_rng = random.Random()


def _template_token(rng: random.Random) -> str:
    """Fill the UUID4 template: ``x`` is any nibble, ``y`` the variant (8..b)."""
    out = []
    for ch in _TEMPLATE:
        if ch == "x":
            out.append("%x" % rng.getrandbits(4))
        elif ch == "y":
            out.append("%x" % (8 | rng.getrandbits(2)))
        else:
            out.append(ch)
    return "".join(out)


def new_token() -> str:
    """Return a fresh idempotency token (UUID4 text form)."""
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        # os.urandom has no entropy source on this platform.
        logger.warning("token_fallback_prng")
        return _template_token(_fallback_rng)
