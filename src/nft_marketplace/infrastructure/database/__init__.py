"""Database infrastructure — engine, ORM models, and repositories."""

from nft_marketplace.infrastructure.database.engine import (
    build_engine,
    close_db,
    create_tables,
    get_session_factory,
    init_db,
    make_session_factory,
)
from nft_marketplace.infrastructure.database.orm_models import (
    Base,
    ListingRecord,
    ProceedsRecord,
)
from nft_marketplace.infrastructure.database.repositories import (
    ListingRepository,
    ProceedsRepository,
)

__all__ = [
    "Base",
    "ListingRecord",
    "ProceedsRecord",
    "ListingRepository",
    "ProceedsRepository",
    "build_engine",
    "close_db",
    "create_tables",
    "get_session_factory",
    "init_db",
    "make_session_factory",
]
