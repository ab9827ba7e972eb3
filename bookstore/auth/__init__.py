"""
Accounts and bearer-token authentication.

The router exposes registration and login; ``current_identity`` is the
dependency other routers use to require a valid token.
"""

from .router import router as auth_router  # noqa: F401
from .security import current_identity  # noqa: F401
