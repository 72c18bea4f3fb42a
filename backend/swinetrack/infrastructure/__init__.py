"""Infrastructure Layer — database sessions, unit of work and logging.

Invariants:
    - Store errors are mapped to the SwineTrack error hierarchy before leaving this layer

Design Decisions:
    - Thin wrappers over SQLAlchemy and stdlib logging, configured from settings
"""
