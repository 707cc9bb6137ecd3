"""Shared pytest fixtures for dreledger tests."""

import tempfile
import os
import pytest

from dreledger.database.factories import create_sqlite_database
from dreledger.domain.card import CardService
from dreledger.domain.category import CategoryService
from dreledger.domain.entities import InstitutionKind, ReportGroup
from dreledger.domain.investment import InvestmentService
from dreledger.domain.net_worth import NetWorthService
from dreledger.domain.state import StateService
from dreledger.domain.transaction import InstitutionService, TransactionService


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
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def institution_service(temp_db):
    """Create an InstitutionService with a temporary database."""
    return InstitutionService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def card_service(temp_db):
    """Create a CardService with a temporary database."""
    return CardService(temp_db)


@pytest.fixture
def investment_service(temp_db):
    """Create an InvestmentService with a temporary database."""
    return InvestmentService(temp_db)


@pytest.fixture
def state_service(temp_db):
    """Create a StateService with a temporary database."""
    return StateService(temp_db)


@pytest.fixture
def net_worth_service(temp_db):
    """Create a NetWorthService with a temporary database."""
    return NetWorthService(temp_db)


@pytest.fixture
def sample_categories(category_service):
    """Create one category per operating group."""
    return {
        "salary": category_service.create_category(
            "Salary", ReportGroup.OPERATING_REVENUE, kind="income", category_id="cat-salary"
        ),
        "groceries": category_service.create_category(
            "Groceries", ReportGroup.SURVIVAL_LIVING_COST, category_id="cat-groceries"
        ),
        "travel": category_service.create_category(
            "Travel", ReportGroup.COMFORT_LIVING_COST, category_id="cat-travel"
        ),
        "software": category_service.create_category(
            "Software", ReportGroup.PROFESSIONAL_EXPENSES, category_id="cat-software"
        ),
    }


@pytest.fixture
def sample_institutions(institution_service):
    """Create a checking account and a broker for entity 'fam'."""
    return {
        "bank": institution_service.create_institution(
            "Itau", InstitutionKind.BANK, entity_id="fam", institution_id="inst-itau"
        ),
        "broker": institution_service.create_institution(
            "XP", InstitutionKind.BROKER, entity_id="fam", institution_id="inst-xp"
        ),
    }


@pytest.fixture
def sample_card(card_service, sample_institutions):
    """Create a credit card paid from the checking account."""
    return card_service.create_card(
        "Black",
        brand="Visa",
        entity_id="fam",
        debit_institution_id=sample_institutions["bank"],
        closing_day=3,
        due_day=10,
        card_id="card-black",
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
