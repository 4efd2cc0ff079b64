"""
App assembly entry point.

Re-exports the FastAPI `app` from `chon.api.main` so `uvicorn app:app` works
from the repository root.
"""

from chon.api.main import app  # noqa: F401
