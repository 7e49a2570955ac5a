"""
Reporting for subnet plans: row collection, statistics, console table and
CSV export.
"""

from __future__ import annotations

from .report import default_csv_name, print_plan, print_summary, render_csv, write_csv
from .summary import collect_rows, contains_label, plan_summary

__all__ = [
    "collect_rows",
    "contains_label",
    "default_csv_name",
    "plan_summary",
    "print_plan",
    "print_summary",
    "render_csv",
    "write_csv",
]
