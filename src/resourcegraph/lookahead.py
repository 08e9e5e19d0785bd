from __future__ import annotations

"""Selection-set inspection for a resolving field.

Fragment spreads and inline fragments are flattened so callers only ever see
field nodes.
"""

from typing import Dict, Iterable, List, Optional

from graphql import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLResolveInfo,
    InlineFragmentNode,
    SelectionSetNode,
)


def _collect(
    selection_set: Optional[SelectionSetNode],
    fragments: Dict[str, FragmentDefinitionNode],
    out: Dict[str, List[FieldNode]],
) -> None:
    if selection_set is None:
        return
    for selection in selection_set.selections:
        if isinstance(selection, FieldNode):
            out.setdefault(selection.name.value, []).append(selection)
        elif isinstance(selection, InlineFragmentNode):
            _collect(selection.selection_set, fragments, out)
        elif isinstance(selection, FragmentSpreadNode):
            fragment = fragments.get(selection.name.value)
            if fragment is not None:
                _collect(fragment.selection_set, fragments, out)


class Lookahead:
    """Selections beneath one or more merged field nodes."""

    def __init__(self, nodes: Iterable[FieldNode], fragments: Dict[str, FragmentDefinitionNode]):
        self.nodes = list(nodes)
        self.fragments = fragments
        self._selections: Optional[Dict[str, List[FieldNode]]] = None

    @classmethod
    def from_info(cls, info: GraphQLResolveInfo) -> "Lookahead":
        return cls(info.field_nodes, info.fragments)

    @property
    def selections(self) -> Dict[str, List[FieldNode]]:
        if self._selections is None:
            out: Dict[str, List[FieldNode]] = {}
            for node in self.nodes:
                _collect(node.selection_set, self.fragments, out)
            self._selections = out
        return self._selections

    def names(self) -> List[str]:
        return list(self.selections)

    def selects(self, name: str) -> bool:
        return name in self.selections

    def selection(self, name: str) -> "Lookahead":
        return Lookahead(self.selections.get(name, []), self.fragments)


__all__ = ["Lookahead"]
