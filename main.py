"""
IPv6 subnet planner: command-line entry point.

Usage:
    python main.py new    --network <addr> --prefix <n>      [--state-file F]
    python main.py split  <cidr> [--to <n>]   (--state <blob> | --state-file F)
    python main.py join   <cidr> --to <n>     (--state <blob> | --state-file F)
    python main.py note   <cidr> <text>       (--state <blob> | --state-file F)
    python main.py color  <cidr> <value>      (--state <blob> | --state-file F)
    python main.py show                       (--state <blob> | --state-file F)
    python main.py export [--output <csv>]    (--state <blob> | --state-file F)

The plan travels between invocations as the encoded state string.  With
--state-file it is read from and written back to that file; otherwise the
new state is printed so it can be passed to the next command.  A missing or
unreadable state falls back to the default plan 3fff::/20.
"""

import argparse
import os
import sys

from export import default_csv_name, print_plan, write_csv
from planner import (
    DecodeError,
    PALETTE,
    PlannerError,
    SubnetTree,
    decode_state,
    encode_state,
)
from planner.state import DEFAULT_NETWORK, DEFAULT_PREFIX


def _add_state_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--state", default=None,
                   help="Encoded plan string (as printed by a previous command)")
    p.add_argument("--state-file", default=None,
                   help="File holding the encoded plan; updated in place")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="IPv6 subnet planner: split, annotate and share address plans"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("new", help="Start a fresh plan")
    p.add_argument("--network", "-n", default=DEFAULT_NETWORK,
                   help=f"Root network address (default: {DEFAULT_NETWORK})")
    p.add_argument("--prefix", "-p", type=int, default=DEFAULT_PREFIX,
                   help=f"Root prefix length, 16-64 (default: {DEFAULT_PREFIX})")
    _add_state_args(p)

    p = sub.add_parser("split", help="Split a subnet")
    p.add_argument("cidr")
    p.add_argument("--to", type=int, default=None, dest="target",
                   help="Target prefix (default: next nibble boundary)")
    _add_state_args(p)

    p = sub.add_parser("join", help="Join a subnet back into its ancestor")
    p.add_argument("cidr")
    p.add_argument("--to", type=int, required=True, dest="target",
                   help="Prefix of the ancestor to collapse")
    _add_state_args(p)

    p = sub.add_parser("note", help="Set the note of a subnet")
    p.add_argument("cidr")
    p.add_argument("text")
    _add_state_args(p)

    p = sub.add_parser("color", help="Set the colour of a subnet ('' clears)")
    p.add_argument("cidr")
    p.add_argument("value",
                   help="Colour value, or a palette index 0-%d" % (len(PALETTE) - 1))
    _add_state_args(p)

    p = sub.add_parser("show", help="Print the plan")
    _add_state_args(p)

    p = sub.add_parser("export", help="Write the plan as CSV")
    p.add_argument("--output", "-o", default=None,
                   help="CSV path (default: ipv6-subnet-plan-<network>-<prefix>.csv)")
    _add_state_args(p)

    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# State plumbing
# ---------------------------------------------------------------------------

def load_plan(args) -> SubnetTree:
    blob = args.state
    if blob is None and args.state_file and os.path.exists(args.state_file):
        with open(args.state_file) as fh:
            blob = fh.read().strip()

    if not blob:
        print(f"[planner] No state given, starting from {DEFAULT_NETWORK}/{DEFAULT_PREFIX}.")
        return SubnetTree(DEFAULT_NETWORK, DEFAULT_PREFIX)

    try:
        plan = decode_state(blob)
    except DecodeError as e:
        print(f"[planner] WARNING: could not decode state: {e}")
        print(f"[planner] Falling back to {DEFAULT_NETWORK}/{DEFAULT_PREFIX}.")
        return SubnetTree(DEFAULT_NETWORK, DEFAULT_PREFIX)

    print(f"[planner] Loaded {plan.root_cidr} ({len(plan):,} subnets).")
    return plan


def save_plan(plan: SubnetTree, args) -> None:
    blob = encode_state(plan)
    if args.state_file:
        with open(args.state_file, "w") as fh:
            fh.write(blob + "\n")
        print(f"[planner] State written to: {args.state_file}")
    else:
        print(f"[planner] State: {blob}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_new(args) -> None:
    plan = SubnetTree.from_network(args.network, args.prefix)
    print(f"[planner] New plan: {plan.root_cidr}")
    save_plan(plan, args)


def cmd_split(args) -> None:
    plan = load_plan(args)
    created = plan.split(args.cidr, args.target)
    print(f"[planner] Split {args.cidr}: {len(created):,} subnets created.")
    save_plan(plan, args)


def cmd_join(args) -> None:
    plan = load_plan(args)
    before = len(plan)
    ancestor = plan.join(args.cidr, args.target)
    print(f"[planner] Joined into {ancestor}: {before - len(plan):,} subnets removed.")
    save_plan(plan, args)


def cmd_note(args) -> None:
    plan = load_plan(args)
    plan.annotate(args.cidr, note=args.text)
    print(f"[planner] Note set on {args.cidr}.")
    save_plan(plan, args)


def cmd_color(args) -> None:
    plan = load_plan(args)
    value = args.value
    if value.isascii() and value.isdigit() and int(value) < len(PALETTE):
        value = PALETTE[int(value)]
    plan.annotate(args.cidr, color=value)
    print(f"[planner] Colour of {args.cidr} set to {value or 'none'}.")
    save_plan(plan, args)


def cmd_show(args) -> None:
    print_plan(load_plan(args))


def cmd_export(args) -> None:
    plan = load_plan(args)
    output = args.output or default_csv_name(plan)
    write_csv(plan, output)
    print(f"[planner] CSV written to: {output}")


HANDLERS = {
    "new":    cmd_new,
    "split":  cmd_split,
    "join":   cmd_join,
    "note":   cmd_note,
    "color":  cmd_color,
    "show":   cmd_show,
    "export": cmd_export,
}


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        HANDLERS[args.command](args)
    except PlannerError as e:
        print(f"[planner] ERROR: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
