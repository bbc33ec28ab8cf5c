"""
Global pytest configuration and fixtures.
"""
import datetime as dt
import os
from decimal import Decimal
from typing import Dict

import pytest

from timebill.config import TimebillConfig, reload_config
from timebill.models import Client, Project, TimesheetEntry, Workspace
from timebill.repositories import BillingRepository, get_engine, get_session_factory, init_db


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        "TIMEBILL_API_URL": "https://bill.example.com",
        "TIMEBILL_SESSION_COOKIE": "test-session-cookie",
        "TIMEBILL_DATABASE_URL": "sqlite:///:memory:",
        "ENVIRONMENT": "testing",
        "DEBUG": "true",
        "LOG_LEVEL": "DEBUG",
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch, tmp_path):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("TIMEBILL_STATE_PATH", str(tmp_path / "state.json"))

    # Clear the global config to force reload with test values
    import timebill.config.settings

    timebill.config.settings._config = None

    yield test_env_vars

    timebill.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> TimebillConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def sample_client() -> Client:
    return Client(id="client-1", workspaceId="ws-1", name="Acme Corp", email="ap@acme.test")


@pytest.fixture
def hourly_project() -> Project:
    return Project(
        id="proj-hourly",
        workspaceId="ws-1",
        name="Website",
        code="WEB",
        clientId="client-1",
        client="Acme Corp",
        billingType="hourly",
        hourlyRate=100,
        status="active",
    )


@pytest.fixture
def fixed_project() -> Project:
    return Project(
        id="proj-fixed",
        workspaceId="ws-1",
        name="Retainer",
        code="RET",
        clientId="client-1",
        client="Acme Corp",
        billingType="fixed",
        fixedAmount=5000,
        status="active",
    )


@pytest.fixture
def sample_timesheets(hourly_project) -> list:
    """Two entries in March 2024 and one in February."""
    return [
        TimesheetEntry(
            id="ts-1",
            date=dt.date(2024, 3, 4),
            projectId=hourly_project.id,
            project=hourly_project.name,
            client="Acme Corp",
            hours=Decimal("2.5"),
            description="Landing page",
            hourlyRate=100,
        ),
        TimesheetEntry(
            id="ts-2",
            date=dt.date(2024, 3, 20),
            projectId=hourly_project.id,
            project=hourly_project.name,
            client="Acme Corp",
            hours=Decimal("1"),
            description="Internal sync",
            billable=False,
            hourlyRate=100,
        ),
        TimesheetEntry(
            id="ts-3",
            date=dt.date(2024, 2, 28),
            projectId=hourly_project.id,
            project=hourly_project.name,
            client="Acme Corp",
            hours=Decimal("3"),
            description="Wireframes",
            hourlyRate=100,
        ),
    ]


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with all tables."""
    engine = get_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine) -> BillingRepository:
    return BillingRepository(get_session_factory(engine))


@pytest.fixture
def seeded_repository(
    repository, sample_client, hourly_project, fixed_project, sample_timesheets
) -> BillingRepository:
    """Repository holding workspace ws-1 (slug acme) and the sample data."""
    repository.add_workspace(Workspace(id="ws-1", name="Acme Studio", slug="acme"))
    repository.add_client("ws-1", sample_client)
    repository.add_project("ws-1", hourly_project)
    repository.add_project("ws-1", fixed_project)
    for entry in sample_timesheets:
        repository.add_timesheet("ws-1", entry)
    return repository


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    for file in ["coverage.xml", ".coverage"]:
        if os.path.exists(file):
            os.remove(file)


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
