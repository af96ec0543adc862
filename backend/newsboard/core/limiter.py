from __future__ import annotations
from slowapi import Limiter
from slowapi.util import get_remote_address

# Keyed by remote address, counters kept in process memory only.
limiter = Limiter(key_func=get_remote_address)
