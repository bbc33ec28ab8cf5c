"""
Fixtures for CLI command tests.
"""
import datetime as dt
from unittest.mock import Mock

import pytest
from click.testing import CliRunner

from timebill.cli.context import CliContext
from timebill.config.logging_config import reset_logging
from timebill.models import Invoice, Workspace, WorkspaceSettings
from timebill.services.data_cache_service import DataCache
from timebill.tracking import MemoryStore
from timebill.tracking.storage import CURRENT_WORKSPACE_KEY

TODAY = dt.date(2024, 3, 31)


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI points the root logger at the runner's stderr."""
    yield
    reset_logging()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workspace():
    return Workspace(id="ws-1", name="Acme Studio", slug="acme")


@pytest.fixture
def api(workspace, sample_client, hourly_project, fixed_project, sample_timesheets):
    """Web API client returning the sample workspace data."""
    api = Mock()
    api.list_workspaces.return_value = [workspace]
    api.list_clients.return_value = [sample_client]
    api.list_projects.return_value = [hourly_project, fixed_project]
    api.list_timesheets.return_value = sample_timesheets
    api.list_invoices.return_value = []
    api.list_templates.return_value = []
    api.list_salary_credits.return_value = []
    api.get_workspace_settings.return_value = WorkspaceSettings()
    return api


@pytest.fixture
def store():
    return MemoryStore({CURRENT_WORKSPACE_KEY: "ws-1"})


@pytest.fixture
def make_obj(api, store):
    """Build a CliContext, optionally backed by a local repository."""

    def make(repository=None, **kwargs):
        return CliContext(
            api=api,
            cache=DataCache(),
            store=store,
            repository=repository,
            today=lambda: TODAY,
            **kwargs,
        )

    return make


@pytest.fixture
def invoke(runner, make_obj):
    """Invoke the CLI with an injected context."""
    from timebill.cli import cli

    def run(args, obj=None, **kwargs):
        return runner.invoke(cli, args, obj=obj or make_obj(), **kwargs)

    return run


@pytest.fixture
def march_invoice():
    return Invoice(
        id="inv-1",
        invoiceNumber="acme-202403-001",
        clientId="client-1",
        client="Acme Corp",
        dateIssued=TODAY,
        status="sent",
        subtotal="5250",
        tax="315",
        total="5565",
    )
