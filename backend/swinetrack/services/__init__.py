"""Services Layer — the consistency engine: one transactional function per command.

Invariants:
    - Every command opens exactly one unit of work and commits at most once
    - Rule checks come from core/; services only load, lock, apply and log

Design Decisions:
    - Handlers split by aggregate (lots, pens, pigs) plus one read-only query module
    - Session handle passed explicitly to every function (no ambient store)
"""
