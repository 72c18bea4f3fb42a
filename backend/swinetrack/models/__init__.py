"""ORM Models — SQLAlchemy declarative models for lots, pens, pigs and the pig change log.

Invariants:
    - All models inherit from Base (db/base.py)
    - Lot is the aggregate root; pens and pigs are scoped by lot_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from swinetrack.models.lot import Lot  # noqa: F401
from swinetrack.models.pen import Pen  # noqa: F401
from swinetrack.models.pig import Pig  # noqa: F401
from swinetrack.models.pig_change import PigChange  # noqa: F401
