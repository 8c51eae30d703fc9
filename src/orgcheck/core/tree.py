"""Hierarchy of records as ``{id, children, record}`` nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

ROOT_ID = "__root__"


@dataclass
class TreeNode:
    id: str
    record: Optional[Any] = None
    children: list[TreeNode] = field(default_factory=list)

    def to_dict(self, encode: Callable[[Any], Any] = lambda r: r) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id}
        if self.record is not None:
            out["record"] = encode(self.record)
        if self.children:
            out["children"] = [child.to_dict(encode) for child in self.children]
        return out

    def walk(self) -> Iterable[TreeNode]:
        yield self
        for child in self.children:
            yield from child.walk()


def build_tree(
    records: Iterable[Any],
    get_id: Callable[[Any], str],
    get_parent_id: Callable[[Any], Optional[str]],
) -> TreeNode:
    """Link records under an artificial root.

    Records whose parent id is None hang off the root. A parent referenced
    before (or without) its own record gets a node with no record.
    """
    nodes: dict[str, TreeNode] = {ROOT_ID: TreeNode(ROOT_ID)}
    for record in records:
        node_id = get_id(record)
        node = nodes.setdefault(node_id, TreeNode(node_id))
        if node.record is None:
            node.record = record
        parent_id = get_parent_id(record) or ROOT_ID
        nodes.setdefault(parent_id, TreeNode(parent_id)).children.append(node)
    return nodes[ROOT_ID]
