"""Unit tests for the invoice commands."""

import datetime as dt
from decimal import Decimal

import pytest

from timebill.models import InvoiceTemplate


class TestPreview:
    """Test suite for invoice preview."""

    def test_preview_from_api(self, invoke):
        """Test March totals for the client with the default 6% tax."""
        result = invoke(["invoice", "preview", "--client", "client-1", "--date", "2024-03-31"])

        assert result.exit_code == 0
        assert "Retainer - Monthly Fee" in result.output
        assert "Subtotal: RM5,250.00" in result.output
        assert "Tax (6%): RM315.00" in result.output
        assert "Total: RM5,565.00" in result.output

    def test_preview_tax_override(self, invoke):
        result = invoke(
            ["invoice", "preview", "--client", "client-1", "--date", "2024-03-31", "--tax-rate", "0"]
        )

        assert "Total: RM5,250.00" in result.output

    def test_preview_unknown_client(self, invoke):
        result = invoke(["invoice", "preview", "--client", "client-9"])

        assert result.exit_code == 0
        assert "No billable work or monthly fees" in result.output

    def test_preview_local(self, invoke, make_obj, seeded_repository):
        result = invoke(
            ["invoice", "preview", "--client", "client-1", "--local"],
            obj=make_obj(seeded_repository),
        )

        assert result.exit_code == 0
        assert "Total: RM5,565.00" in result.output

    def test_no_workspace_selected(self, invoke, store):
        """Test a clear error when no workspace is remembered."""
        store.delete("current-workspace-id")

        result = invoke(["invoice", "preview", "--client", "client-1"])

        assert result.exit_code == 3
        assert "No workspace selected" in result.output

    def test_invalid_date(self, invoke):
        result = invoke(["invoice", "preview", "--client", "client-1", "--date", "31/03/2024"])

        assert result.exit_code == 2
        assert "Invalid value" in result.output


class TestNextNumber:
    """Test suite for invoice next-number."""

    def test_follows_existing_numbers(self, invoke, api, march_invoice):
        api.list_invoices.return_value = [march_invoice]

        result = invoke(["invoice", "next-number"])

        assert result.exit_code == 0
        assert result.output.strip() == "acme-202403-002"

    def test_local(self, invoke, make_obj, seeded_repository):
        result = invoke(["invoice", "next-number", "--local"], obj=make_obj(seeded_repository))

        assert result.output.strip() == "acme-202403-001"


class TestCreate:
    """Test suite for invoice create."""

    def test_create_via_api(self, invoke, api):
        """Test the draft is posted with the billed timesheet ids."""
        api.create_invoice.return_value = {"invoiceNumber": "acme-202403-001"}

        result = invoke(
            ["invoice", "create", "--client", "client-1", "--due-date", "2024-04-30", "--notes", "Thanks"]
        )

        assert result.exit_code == 0
        assert "Created invoice acme-202403-001 (total 5565.00)" in result.output
        workspace_id, invoice, timesheet_ids = api.create_invoice.call_args.args
        assert workspace_id == "ws-1"
        assert invoice.due_date == dt.date(2024, 4, 30)
        assert invoice.total == Decimal("5565.00")
        assert len(invoice.items) == 3
        assert timesheet_ids == ["ts-1", "ts-2"]

    def test_create_local(self, invoke, make_obj, seeded_repository):
        result = invoke(
            ["invoice", "create", "--client", "client-1", "--local"],
            obj=make_obj(seeded_repository),
        )

        assert result.exit_code == 0
        assert "Created invoice acme-202403-001" in result.output
        assert len(seeded_repository.list_invoices("ws-1")) == 1


class TestSetStatus:
    """Test suite for invoice set-status."""

    def test_set_status_by_number(self, invoke, api, march_invoice):
        api.list_invoices.return_value = [march_invoice]

        result = invoke(["invoice", "set-status", "acme-202403-001", "paid"])

        assert result.exit_code == 0
        updated = api.update_invoice.call_args.args[0]
        assert updated.id == "inv-1"
        assert updated.status == "paid"

    def test_unknown_invoice(self, invoke):
        result = invoke(["invoice", "set-status", "nope", "paid"])

        assert result.exit_code == 7
        assert "Invoice nope not found" in result.output

    def test_invalid_status(self, invoke):
        result = invoke(["invoice", "set-status", "inv-1", "cancelled"])

        assert result.exit_code == 2

    def test_paid_locally_records_credit(self, invoke, make_obj, seeded_repository):
        """Test that paying a local invoice credits the fixed project."""
        obj = make_obj(seeded_repository)
        invoice = obj.invoice_service.create_invoice(
            "ws-1", obj.invoice_service.build_draft("ws-1", "client-1", dt.date(2024, 3, 31))
        )

        result = invoke(["invoice", "set-status", invoice.id, "paid", "--local"], obj=obj)

        assert result.exit_code == 0
        credits = seeded_repository.list_salary_credits(["proj-fixed"])
        assert [c.work_month for c in credits] == [dt.date(2024, 3, 1)]


class TestRendering:
    """Test suite for invoice html and pdf."""

    def test_html_to_stdout(self, invoke, api, march_invoice):
        api.list_invoices.return_value = [march_invoice]

        result = invoke(["invoice", "html", "inv-1"])

        assert result.exit_code == 0
        assert "acme-202403-001" in result.output
        assert "Acme Studio" in result.output

    def test_html_uses_default_template(self, invoke, api, march_invoice, tmp_path):
        """Test the workspace default template is used when none is given."""
        api.list_invoices.return_value = [march_invoice]
        api.list_templates.return_value = [
            InvoiceTemplate(id="tpl-1", name="Plain", htmlTemplate="<p>{{invoice.number}}</p>"),
            InvoiceTemplate(
                id="tpl-2", name="Default", htmlTemplate="<h1>{{total}}</h1>", isDefault=True
            ),
        ]
        output = tmp_path / "invoice.html"

        result = invoke(["invoice", "html", "inv-1", "-o", str(output)])

        assert result.exit_code == 0
        assert output.read_text() == "<h1>RM5565.00</h1>"

    def test_html_explicit_template(self, invoke, api, march_invoice):
        api.list_invoices.return_value = [march_invoice]
        api.list_templates.return_value = [
            InvoiceTemplate(id="tpl-1", name="Plain", htmlTemplate="<p>{{invoice.number}}</p>"),
        ]

        result = invoke(["invoice", "html", "inv-1", "--template", "tpl-1"])

        assert "<p>acme-202403-001</p>" in result.output

    @pytest.mark.parametrize("explicit", [True, False])
    def test_pdf(self, invoke, api, march_invoice, tmp_path, monkeypatch, explicit):
        api.list_invoices.return_value = [march_invoice]
        monkeypatch.chdir(tmp_path)
        args = ["invoice", "pdf", "acme-202403-001"]
        if explicit:
            args += ["-o", "out.pdf"]

        result = invoke(args)

        assert result.exit_code == 0
        name = "out.pdf" if explicit else "invoice_acme-202403-001_2024-03-31.pdf"
        assert (tmp_path / name).read_bytes().startswith(b"%PDF")
