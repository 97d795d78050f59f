"""
NextUp backend package.

Exposes the FastAPI app instance for convenience imports (nextup.app).
"""

from .main import app  # noqa: F401
