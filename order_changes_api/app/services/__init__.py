"""
Service layer abstraction.

Each service encapsulates the database operations for a domain.  A
service receives its database handle when constructed so that API
handlers and tests decide which database it talks to.
"""
