"""Shared test configuration and fixtures."""

import os
import sys
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

sys.path.append("src")


@pytest.fixture
def isolated_db():
    """Create an isolated database for testing."""
    # Create a temporary database file
    temp_fd, temp_path = tempfile.mkstemp(suffix=".db")
    db_url = f"sqlite:///{temp_path}"

    engine = create_engine(db_url, connect_args={"check_same_thread": False})
    try:
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        # Create tables
        from tradelab.ormdb.database import Base
        from tradelab.ormdb import models  # noqa: F401

        Base.metadata.create_all(bind=engine)

        yield {
            "engine": engine,
            "session_factory": SessionLocal,
            "db_url": db_url,
            "db_path": temp_path,
        }

    finally:
        # Cleanup
        engine.dispose()
        os.close(temp_fd)
        try:
            os.unlink(temp_path)
        except OSError:
            pass


@pytest.fixture
def sample_scenario():
    """A short crisis scenario with one objective."""
    from tradelab.services.scenario.models import (
        Difficulty,
        ObjectiveType,
        Scenario,
        ScenarioCategory,
        ScenarioObjective,
    )

    return Scenario(
        id="scenario-test",
        title="Test Crisis",
        description="A three day crisis for testing",
        difficulty=Difficulty.BEGINNER,
        category=ScenarioCategory.CRISIS,
        initial_cash=100000.0,
        duration=3,
        objectives=(
            ScenarioObjective(
                id="obj-1",
                description="Finish with a positive return",
                type=ObjectiveType.RETURN,
                target=0,
            ),
        ),
    )


@pytest.fixture
def sample_asset():
    from tradelab.services.market.models import Asset, AssetClass

    return Asset(
        id="1",
        symbol="AAPL",
        name="Apple Inc.",
        asset_class=AssetClass.STOCK,
        current_price=150.25,
        change_24h=2.5,
        volume=50_000_000,
    )


@pytest.fixture
def fixed_now():
    return datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_oracle_client():
    """Oracle client whose replies are set per test via ``complete.return_value``."""
    client = Mock()
    client.complete = AsyncMock(return_value="")
    return client


@pytest.fixture
def mock_scheduler():
    """Scheduler stand-in that records jobs without running them."""
    scheduler = Mock()
    scheduler.running = True
    return scheduler


@pytest.fixture(autouse=True)
def clean_lru_cache():
    """Clear LRU caches between tests to avoid state pollution."""
    from tradelab.config.settings import get_settings
    from tradelab.oracle.prompts import load_oracle_prompts

    yield

    # Clear the caches after each test
    load_oracle_prompts.cache_clear()
    get_settings.cache_clear()
