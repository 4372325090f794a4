"""
Service layer.

Each service encapsulates the business logic for one domain and works
against the ``EntityStore`` it is constructed with, so API handlers
never touch the store directly.
"""
