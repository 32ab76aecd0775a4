"""Random suffix "slugs" used when generating new row identifiers."""

from __future__ import annotations

import random
import string

_LETTERS = string.ascii_lowercase
_SUFFIX_LENGTH = 10


def _random_letters(count: int) -> str:
    # Not cryptographically secure; identifiers only need to be unlikely to collide.
    return "".join(random.choices(_LETTERS, k=count))


def generate(prefix: str) -> str:
    """Return ``prefix`` joined by an underscore to ten random lowercase letters."""
    return f"{prefix}_{_random_letters(_SUFFIX_LENGTH)}"