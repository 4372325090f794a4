"""
Pydantic schema definitions for API payloads.

Schemas are kept separate from the stored entities in ``core.store`` so
that the API representation (which never includes password hashes)
is decoupled from what the store holds.
"""
