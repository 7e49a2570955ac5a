"""
Plan persistence.

A plan is stored as one opaque string that can live in a URL fragment, a
file or a clipboard.  The envelope is the one the web planner used for its
share links:

    base64( percent-encode( JSON ) )

with the JSON shaped as

    {
      "network": "3fff::",
      "prefix": 20,
      "tree": {
        "3fff::/20": {"note": "", "color": "", "children": ["3fff::/24", ...]},
        "3fff::/24": {"note": "DC", "color": "#FF0000", "children": []},
        ...
      }
    }

Decoding validates the shape with pydantic and then checks that the tree
hangs together (canonical keys, root present, children present and nested
inside their parent, every node reachable from the root).  Anything wrong
is reported as ``DecodeError``.
"""

from __future__ import annotations

import base64
import json
from typing import Dict, List
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, ValidationError

from .address import split_cidr
from .errors import DecodeError, PlannerError
from .ordering import sort_cidrs
from .prefix import canonical_cidr, mask
from .tree import SubnetNode, SubnetTree

DEFAULT_NETWORK = "3fff::"
DEFAULT_PREFIX = 20

# Characters encodeURIComponent leaves alone.
_URI_SAFE = "-_.!~*'()"


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class NodeState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    note: StrictStr = ""
    color: StrictStr = ""
    children: List[StrictStr] = []


class PersistedState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    network: StrictStr
    prefix: StrictInt
    tree: Dict[StrictStr, NodeState]

    @classmethod
    def from_tree(cls, tree: SubnetTree) -> PersistedState:
        return cls(
            network=str(tree.network),
            prefix=tree.prefix,
            tree={
                cidr: NodeState(note=node.note, color=node.color, children=list(node.children))
                for cidr, node in tree.nodes.items()
            },
        )

    def to_tree(self) -> SubnetTree:
        """Rebuild the plan, raising ``DecodeError`` if it is inconsistent."""
        try:
            root_address, _ = split_cidr(f"{self.network}/{self.prefix}")
            root_cidr = canonical_cidr(f"{self.network}/{self.prefix}")
            for key in self.tree:
                if canonical_cidr(key) != key:
                    raise DecodeError(f"Non-canonical subnet key: {key}")
        except DecodeError:
            raise
        except PlannerError as e:
            raise DecodeError(str(e)) from e

        if root_cidr not in self.tree:
            raise DecodeError(f"Root subnet {root_cidr} missing from tree")

        owner: Dict[str, str] = {}
        nodes: Dict[str, SubnetNode] = {}
        for key, state in self.tree.items():
            address, prefix = split_cidr(key)
            for child in state.children:
                if child not in self.tree:
                    raise DecodeError(f"{key} lists unknown child {child}")
                if child in owner:
                    raise DecodeError(f"{child} has two parents: {owner[child]} and {key}")
                child_address, child_prefix = split_cidr(child)
                if child_prefix <= prefix or mask(child_address, prefix) != address:
                    raise DecodeError(f"{child} does not fit inside {key}")
                owner[child] = key
            nodes[key] = SubnetNode(
                note=state.note,
                color=state.color,
                children=sort_cidrs(state.children),
            )

        # Single parents and strictly longer child prefixes rule out cycles,
        # so every key other than the root must be owned to be reachable.
        for key in self.tree:
            if key != root_cidr and key not in owner:
                raise DecodeError(f"{key} is not reachable from {root_cidr}")

        return SubnetTree(root_address, self.prefix, nodes)


# ---------------------------------------------------------------------------
# Public codec
# ---------------------------------------------------------------------------

def encode_state(tree: SubnetTree) -> str:
    """Serialise *tree* into a compact, URL-fragment-safe string."""
    payload = PersistedState.from_tree(tree).model_dump()
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(quote(text, safe=_URI_SAFE).encode("ascii")).decode("ascii")


def decode_state(text: str) -> SubnetTree:
    """Inverse of :func:`encode_state`.  Raises ``DecodeError`` on bad input."""
    blob = text.strip().lstrip("#")
    if not blob:
        raise DecodeError("Empty state")

    try:
        raw = base64.b64decode(blob, validate=True).decode("ascii")
        payload = json.loads(unquote(raw, errors="strict"))
        state = PersistedState.model_validate(payload)
    except ValidationError as e:
        raise DecodeError(f"State has the wrong shape: {e.error_count()} error(s)") from e
    except ValueError as e:
        # base64, unicode and JSON failures all derive from ValueError
        raise DecodeError(f"State is not a valid encoded plan: {e}") from e

    return state.to_tree()


def decode_state_or_default(text: str | None) -> SubnetTree:
    """Decode *text*, falling back to a fresh default plan on any error."""
    if not text:
        return SubnetTree(DEFAULT_NETWORK, DEFAULT_PREFIX)
    try:
        return decode_state(text)
    except DecodeError:
        return SubnetTree(DEFAULT_NETWORK, DEFAULT_PREFIX)
