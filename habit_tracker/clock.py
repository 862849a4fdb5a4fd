"""Request-scoped time and randomness, overridable in tests via ``app.dependency_overrides``."""

import random
from datetime import datetime


def get_now() -> datetime:
    return datetime.utcnow()


def get_rng() -> random.Random:
    return random.Random()
