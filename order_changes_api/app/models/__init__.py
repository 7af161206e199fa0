"""
Persistence models.

Each module declares the shape of a stored document, the collection it
lives in and the defaults applied before it is written.
"""
