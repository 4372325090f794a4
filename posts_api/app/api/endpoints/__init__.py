"""
Endpoint modules.

Each module defines an ``APIRouter`` for one domain (health, auth,
users, posts).  The routers are aggregated in ``api.router``.
"""
