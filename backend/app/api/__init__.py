"""
API Routers package.

We intentionally re-export the router modules so `app.main` can import and register them.
"""

from . import admin_announcements  # noqa: F401
from . import announcements  # noqa: F401
from . import auth  # noqa: F401
