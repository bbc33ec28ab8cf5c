"""Aggregators module for combining workspace data.

This module provides functionality to aggregate timesheets, projects,
invoices and salary credits into invoice drafts and dashboard summaries.
"""

from timebill.aggregators.dashboard_aggregator import (
    DashboardSummary,
    summarize_dashboard,
)
from timebill.aggregators.invoice_aggregator import InvoiceAggregator, InvoiceDraft

__all__ = [
    "DashboardSummary",
    "InvoiceAggregator",
    "InvoiceDraft",
    "summarize_dashboard",
]
