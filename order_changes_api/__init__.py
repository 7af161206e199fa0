"""
Top‑level package for the Order Changes API.

This file makes ``order_changes_api`` a Python package so that
modules within ``app`` can be imported using fully qualified names
like ``order_changes_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
