"""
Plan report formatting and CSV export.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Dict

from planner.tree import SubnetTree

from .summary import collect_rows, plan_summary

CSV_HEADER = ["Subnet", "Contains", "Note"]


def default_csv_name(tree: SubnetTree) -> str:
    return f"ipv6-subnet-plan-{tree.network}-{tree.prefix}.csv"


def print_plan(tree: SubnetTree) -> None:
    """Print the plan as an indented table followed by its statistics."""
    rows = collect_rows(tree)
    width = max(len("  " * r["depth"] + r["cidr"]) for r in rows)
    width = max(width, len("Subnet"))

    sep = "─" * (width + 48)
    print()
    print(sep)
    print(f"  {'Subnet':<{width}}  {'Contains':<22}  Note")
    print(sep)
    for r in rows:
        subnet = "  " * r["depth"] + r["cidr"]
        note = r["note"]
        if r["color"]:
            note = f"{note} [{r['color']}]".strip()
        print(f"  {subnet:<{width}}  {r['contains']:<22}  {note}")
    print(sep)
    print_summary(plan_summary(tree))


def print_summary(summary: Dict[str, Any]) -> None:
    """Print a formatted statistics block to stdout."""
    def fmt_int(v):   return f"{v:,}" if isinstance(v, int) else str(v)

    sep = "─" * 50
    print(f"  Plan          : {summary.get('root', '?')}")
    print(f"  Subnets       : {fmt_int(summary.get('nodes', 0))}")
    print(f"  Leaves        : {fmt_int(summary.get('leaves', 0))}")
    print(f"  Max depth     : {fmt_int(summary.get('max_depth', 0))}")
    print(f"  Annotated     : {fmt_int(summary.get('annotated', 0))}")
    print(sep)
    print(f"  /48s covered  : {fmt_int(summary.get('slash48_total', 0))}")
    print(f"  /64s covered  : {fmt_int(summary.get('slash64_total', 0))}")
    print(sep)
    print()


def render_csv(tree: SubnetTree) -> str:
    """Plan as CSV text: indented subnet, contains label, note.

    The header is bare; every data field is quoted with quotes doubled.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buf.write(",".join(CSV_HEADER) + "\n")
    for r in collect_rows(tree):
        writer.writerow(["  " * r["depth"] + r["cidr"], r["contains"], r["note"]])
    return buf.getvalue()


def write_csv(tree: SubnetTree, path: str) -> None:
    """Persist the plan as CSV."""
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(render_csv(tree))
