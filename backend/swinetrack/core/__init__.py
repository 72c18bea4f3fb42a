"""Core Layer — pure domain rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic
    - Rule checks return a typed error or None; the caller decides to raise

Design Decisions:
    - Functional core separated from the transactional shell in services/
"""
