"""
Unit test configuration
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from leadflow.db.base import Base
import leadflow.models  # noqa: F401  registers every table


@pytest.fixture
def db_session():
    """Create test database session."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def fast_hashing(mocker):
    """Swap bcrypt for a cheap reversible hash."""
    mocker.patch("leadflow.repositories.user_repo.hash_password", side_effect=lambda p: f"hashed:{p}")
    mocker.patch(
        "leadflow.repositories.user_repo.verify_password",
        side_effect=lambda p, h: h == f"hashed:{p}",
    )
