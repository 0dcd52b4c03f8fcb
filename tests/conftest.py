"""Pytest bootstrap for project imports."""

from pathlib import Path
import os
import sys

# Ensure project root is on sys.path so `import coursereview` works
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

# Keep the test run away from any local database file or .env overrides
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("MIN_REVIEWS_FOR_DISPLAY", "10")
