# coursereview/api/__init__.py
# This file makes the api directory a Python package.

from . import admin
from . import auth
from . import catalog
from . import files
from . import review
from . import stats
from . import tags

__all__ = [
    "admin",
    "auth",
    "catalog",
    "files",
    "review",
    "stats",
    "tags",
]
