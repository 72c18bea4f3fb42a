"""SwineTrack Application Package — herd consistency engine for lots, pens and pigs.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
