"""Pydantic Schemas — command payloads and entity snapshots at the engine boundary.

Invariants:
    - Schemas validate shape and ranges (user input, API responses)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are contracts, models are persistence
"""
