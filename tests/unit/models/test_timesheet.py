"""Unit tests for the TimesheetEntry model."""
import datetime as dt
from decimal import Decimal

import pytest
from pydantic import ValidationError

from timebill.models import TimesheetEntry


def make_entry(**overrides) -> TimesheetEntry:
    data = {
        "date": "2024-03-15",
        "projectId": "p-1",
        "hours": 2.5,
        "description": "Design review",
        "hourlyRate": 100,
    }
    data.update(overrides)
    return TimesheetEntry(**data)


class TestTimesheetEntry:
    """Test TimesheetEntry validation and totals."""

    def test_create_from_api_payload(self):
        """Test creating an entry from a camelCase payload."""
        entry = make_entry()

        assert entry.date == dt.date(2024, 3, 15)
        assert entry.project_id == "p-1"
        assert entry.hours == Decimal("2.5")
        assert entry.billable is True

    def test_total_for_billable_entry(self):
        """Test that billable entries total hours × rate."""
        assert make_entry().total == Decimal("250.0")

    def test_total_for_non_billable_entry(self):
        """Test that non-billable entries total zero."""
        assert make_entry(billable=False).total == Decimal("0")

    def test_total_is_serialized(self):
        """Test that the computed total appears in dumps."""
        assert make_entry().model_dump(by_alias=True)["total"] == Decimal("250.0")

    def test_zero_hours_rejected(self):
        """Test that hours must be positive."""
        with pytest.raises(ValidationError):
            make_entry(hours=0)

    def test_empty_project_rejected(self):
        """Test that a blank project id is rejected."""
        with pytest.raises(ValidationError):
            make_entry(projectId=" ")

    def test_null_description_becomes_empty(self):
        """Test that a null description is stored as an empty string."""
        assert make_entry(description=None).description == ""

    def test_null_rate_becomes_zero(self):
        """Test that a null hourly rate totals zero."""
        entry = make_entry(hourlyRate=None)

        assert entry.hourly_rate == Decimal("0")
        assert entry.total == Decimal("0")
