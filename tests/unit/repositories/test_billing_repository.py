"""
Unit tests for the billing repository on an in-memory SQLite database.
"""

import datetime as dt
from decimal import Decimal

import pytest

from timebill.models import Invoice, InvoiceLineItem, SalaryCredit, WorkspaceSettings
from timebill.services.errors import DuplicateRecordError


def make_invoice(number: str, **kwargs) -> Invoice:
    values = dict(
        invoice_number=number,
        client_id="client-1",
        date_issued=dt.date(2024, 3, 31),
        subtotal="100",
        tax="6",
        total="106",
        items=[InvoiceLineItem(description="Website - Work", quantity=1, unit_price=100, total=100)],
    )
    values.update(kwargs)
    return Invoice(**values)


class TestEntities:
    """Test cases for workspace, client, project and timesheet access."""

    def test_workspace_round_trip(self, seeded_repository):
        workspace = seeded_repository.get_workspace("ws-1")

        assert workspace.slug == "acme"
        assert seeded_repository.get_workspace("missing") is None

    def test_project_carries_client_name(self, seeded_repository):
        """Test that projects are returned with their client's name."""
        project = seeded_repository.get_project("proj-fixed")

        assert project.is_fixed
        assert project.fixed_amount == Decimal("5000")
        assert project.client == "Acme Corp"

    def test_list_projects(self, seeded_repository):
        ids = {p.id for p in seeded_repository.list_projects("ws-1")}

        assert ids == {"proj-hourly", "proj-fixed"}
        assert seeded_repository.list_projects("ws-2") == []

    def test_first_fixed_project(self, seeded_repository):
        assert seeded_repository.first_fixed_project("client-1").id == "proj-fixed"
        assert seeded_repository.first_fixed_project("client-2") is None

    def test_timesheets_newest_first_with_rate(self, seeded_repository):
        """Test that timesheets carry the project rate and are sorted by date."""
        timesheets = seeded_repository.list_timesheets("ws-1")

        assert [t.id for t in timesheets] == ["ts-2", "ts-1", "ts-3"]
        assert all(t.hourly_rate == Decimal("100") for t in timesheets)
        assert timesheets[1].total == Decimal("250")
        assert timesheets[0].client == "Acme Corp"


class TestSettings:
    """Test cases for workspace settings storage."""

    def test_defaults_without_rows(self, seeded_repository):
        settings = seeded_repository.get_settings("ws-1")

        assert settings.currency == "MYR"
        assert settings.tax_rate == Decimal("6")

    def test_save_and_update(self, seeded_repository):
        """Test that saving twice updates existing keys."""
        seeded_repository.save_settings(
            "ws-1", WorkspaceSettings.from_mapping({"currency": "USD", "theme": "dark"})
        )
        seeded_repository.save_settings(
            "ws-1", WorkspaceSettings.from_mapping({"currency": "EUR", "taxRate": "8"})
        )

        settings = seeded_repository.get_settings("ws-1")

        assert settings.currency == "EUR"
        assert settings.tax_rate == Decimal("8")
        assert settings.additional == {"theme": "dark"}


class TestInvoices:
    """Test cases for invoice persistence."""

    def test_create_and_get(self, seeded_repository):
        stored = seeded_repository.create_invoice("ws-1", make_invoice("acme-202403-001"))

        loaded = seeded_repository.get_invoice(stored.id)

        assert loaded.invoice_number == "acme-202403-001"
        assert loaded.client == "Acme Corp"
        assert loaded.total == Decimal("106")
        assert [i.description for i in loaded.items] == ["Website - Work"]

    def test_invoice_numbers_by_prefix(self, seeded_repository):
        """Test that only numbers with the prefix are returned."""
        for number in ["acme-202403-001", "acme-202403-002", "acme-202402-009"]:
            seeded_repository.create_invoice("ws-1", make_invoice(number))

        numbers = seeded_repository.list_invoice_numbers("ws-1", "acme-202403-")

        assert sorted(numbers) == ["acme-202403-001", "acme-202403-002"]

    def test_duplicate_number_rejected(self, seeded_repository):
        seeded_repository.create_invoice("ws-1", make_invoice("acme-202403-001"))

        with pytest.raises(DuplicateRecordError):
            seeded_repository.create_invoice("ws-1", make_invoice("acme-202403-001"))

    def test_update_keeps_items(self, seeded_repository):
        """Test that updates change header fields only."""
        stored = seeded_repository.create_invoice("ws-1", make_invoice("acme-202403-001"))
        stored.status = "sent"
        stored.items = []

        updated = seeded_repository.update_invoice(stored)

        assert updated.status == "sent"
        assert len(updated.items) == 1

    def test_update_missing(self, seeded_repository):
        assert seeded_repository.update_invoice(make_invoice("x", id="missing")) is None

    def test_delete(self, seeded_repository):
        stored = seeded_repository.create_invoice("ws-1", make_invoice("acme-202403-001"))

        assert seeded_repository.delete_invoice(stored.id) is True
        assert seeded_repository.delete_invoice(stored.id) is False
        assert seeded_repository.list_invoices("ws-1") == []


class TestSalaryCredits:
    """Test cases for salary credit storage."""

    def make_credit(self, work_month, credited):
        return SalaryCredit(
            project_id="proj-fixed",
            work_month=work_month,
            credited_date=credited,
            amount="5000",
        )

    def test_unique_per_month(self, seeded_repository):
        """Test the database rejects a second credit for the same month."""
        seeded_repository.insert_salary_credit(
            self.make_credit(dt.date(2024, 2, 1), dt.date(2024, 3, 5))
        )

        with pytest.raises(DuplicateRecordError):
            seeded_repository.insert_salary_credit(
                self.make_credit(dt.date(2024, 2, 1), dt.date(2024, 3, 9))
            )

    def test_list_newest_first(self, seeded_repository):
        seeded_repository.insert_salary_credit(
            self.make_credit(dt.date(2024, 1, 1), dt.date(2024, 2, 3))
        )
        seeded_repository.insert_salary_credit(
            self.make_credit(dt.date(2024, 2, 1), dt.date(2024, 3, 5))
        )

        credits = seeded_repository.list_salary_credits(["proj-fixed"])

        assert [c.work_month for c in credits] == [dt.date(2024, 2, 1), dt.date(2024, 1, 1)]
