"""
Application package initializer.

The service is split into ``core`` (configuration, logging, errors,
hashing and the JSON store), ``schemas`` (pydantic request, response
and storage models), ``services`` (account, transfer and history
logic) and ``api`` (FastAPI routers).
"""

from .main import app  # noqa: F401
