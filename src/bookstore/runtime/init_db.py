"""Database initialization script."""

from src.bookstore.core.services import DbManageService, DbSessionService


def init_db(database_service: DbSessionService | None = None, drop: bool = False) -> None:
    """Create all database tables, optionally dropping the existing ones first."""
    database_service = database_service or DbSessionService()
    manager = DbManageService(database_service.engine)
    try:
        if drop:
            manager.drop_all()
        manager.create_all()
    finally:
        database_service.engine.dispose()


if __name__ == "__main__":
    init_db()
