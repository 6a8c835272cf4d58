from __future__ import annotations

import time


def now_ts() -> int:
    """Current epoch time in whole seconds."""
    return int(time.time())
