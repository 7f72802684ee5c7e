"""Node arena and the visited-set shared by every graph walk.

The compiled schema graph may be cyclic: an array of objects whose items
hold an array of the original type, or a dictionary whose values point back
at the dictionary's owner. Every pass that walks the graph therefore guards
itself with a :class:`VisitedSet`. Membership is decided by the stable
``node_id`` handed out by :class:`ModelGraph`, not by ``id()`` of the Python
object, so a set survives copies of the node list and stays meaningful in
debug output.
"""

from __future__ import annotations

from typing import Any, Iterator

from specforge.models import Model


class ModelGraph:
    """Arena owning every :class:`~specforge.models.Model` of one compilation run.

    Nodes are only ever created through :meth:`new_model` so that each one
    carries a unique, dense ``node_id``.
    """

    def __init__(self) -> None:
        self._nodes: list[Model] = []

    def new_model(self, **fields: Any) -> Model:
        model = Model(node_id=len(self._nodes), **fields)
        self._nodes.append(model)
        return model

    def get(self, node_id: int) -> Model:
        return self._nodes[node_id]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Model]:
        return iter(self._nodes)


class VisitedSet:
    """Set of node ids already handled by a single pass.

    Example::

        visited = VisitedSet()

        def walk(model):
            if not visited.visit(model):
                return
            for child in model.properties:
                walk(child)
    """

    def __init__(self) -> None:
        self._seen: set[int] = set()

    def visit(self, model: Model) -> bool:
        """Mark *model* as visited.

        Returns:
            ``True`` the first time a node is seen, ``False`` afterwards.
        """
        if model.node_id in self._seen:
            return False
        self._seen.add(model.node_id)
        return True

    def __contains__(self, model: Model) -> bool:
        return model.node_id in self._seen

    def __len__(self) -> int:
        return len(self._seen)
