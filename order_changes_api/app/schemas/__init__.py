"""
Pydantic schema definitions for API payloads.

Schemas are separated from persistence models to decouple the API
representation (camelCase field names, string identifiers) from the
stored documents.
"""
