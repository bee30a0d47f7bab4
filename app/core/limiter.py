"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)

# Mutations (workflow CRUD, manual execution, template set writes)
limit_writes = limiter.limit(lambda: get_settings().rate_limit_writes)
