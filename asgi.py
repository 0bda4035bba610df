"""
asgi.py -- ASGI entry point for custauth.

Run with:  uvicorn asgi:app --reload
"""

from api.main import app  # noqa: F401
