"""Database Infrastructure — SQLAlchemy Base and id/timestamp defaults.

Invariants:
    - Single async engine per process (initialized via infrastructure.database.init_db)
    - All sessions are async (AsyncSession)
"""
