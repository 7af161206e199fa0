"""
Application package initializer.

The order change module is organised in layers: ``models`` declares
the stored document, ``schemas`` the request and response payloads,
``services`` the database operations and ``api/v1/endpoints`` the HTTP
bindings.  ``main`` assembles them into a FastAPI application.
"""

from .main import app  # noqa: F401
