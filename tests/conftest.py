"""Shared pytest fixtures for costwise tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from costwise.database.factories import create_sqlite_database
from costwise.domain.analytics import AnalyticsService
from costwise.domain.budget import BudgetService
from costwise.domain.business_context import BusinessContextService
from costwise.domain.classification import ClassificationService
from costwise.domain.entities import TransactionType
from costwise.domain.patterns import PatternLibrary
from costwise.domain.rules import CustomRuleService
from costwise.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def context_service(temp_db):
    """Create a BusinessContextService with a temporary database."""
    return BusinessContextService(temp_db)


@pytest.fixture
def rule_service(temp_db):
    """Create a CustomRuleService with a temporary database."""
    return CustomRuleService(temp_db)


@pytest.fixture
def pattern_library(temp_db):
    """Create a PatternLibrary with a temporary database."""
    return PatternLibrary(temp_db)


@pytest.fixture
def classification_service(temp_db):
    """Create a ClassificationService with a temporary database."""
    return ClassificationService(temp_db, max_workers=2, retries=1)


@pytest.fixture
def analytics_service(temp_db):
    """Create an AnalyticsService with a temporary database."""
    return AnalyticsService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    """Create a BudgetService with a temporary database."""
    return BudgetService(temp_db)


@pytest.fixture
def seeded_patterns(pattern_library):
    """Load the built-in pattern catalog."""
    pattern_library.seed_defaults()
    return pattern_library


@pytest.fixture
def manufacturing_profile(context_service):
    """Save a Manufacturing business profile."""
    return context_service.save_profile(
        category="Manufacturing",
        business_model="Contract manufacturing",
        core_activities=["assembly", "machining"],
        revenue_streams=["product sales"],
        cost_centers=["plant"],
    )


@pytest.fixture
def add_txn(transaction_service):
    """Return a helper that records a transaction and returns its ID."""

    def _add(
        day: date,
        amount: str,
        type: TransactionType = TransactionType.EXPENSE,
        description: str | None = None,
        category: str | None = None,
    ) -> int:
        return transaction_service.create_transaction(
            date=day,
            amount=Decimal(amount),
            type=type,
            description=description,
            category=category,
        )

    return _add


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
