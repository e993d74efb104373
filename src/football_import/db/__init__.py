from football_import.db.base import Base
from football_import.db.engine import (
    DatabaseConfig,
    create_db_engine,
    create_session_factory,
    run_in_transaction,
)

__all__ = [
    "Base",
    "DatabaseConfig",
    "create_db_engine",
    "create_session_factory",
    "run_in_transaction",
]
