# app/domain/ids.py
from __future__ import annotations

import random
from typing import Callable

# Remote ids handed out for brand new contacts. Demo-grade: collisions are possible.
EXTERNAL_ID_MIN = 0
EXTERNAL_ID_MAX = 100

IdGenerator = Callable[[], str]


def random_external_id() -> str:
    return str(random.randint(EXTERNAL_ID_MIN, EXTERNAL_ID_MAX))
