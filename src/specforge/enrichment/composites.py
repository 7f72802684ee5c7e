"""Resolve the members of ``oneOf``/``anyOf``/``allOf`` models.

Templates render a composite as a union (one-of, any-of) or as a mixin of
its members (all-of), so every composed model gets two lists:

* ``composed_models`` -- the named models it is made of. For all-of this is
  the transitive closure: a member that is itself an all-of contributes its
  own members too, each model appearing exactly once.
* ``composed_primitives`` -- inline, non-reference branches (e.g. a bare
  ``type: string`` branch of a oneOf).

An all-of with any primitive branch cannot be expressed as a mixin and is
rejected with :class:`~specforge.exceptions.InvalidCompositionError`.
"""

from __future__ import annotations

import logging

from specforge.exceptions import InvalidCompositionError
from specforge.graph import VisitedSet
from specforge.models import Model, ModelKind, ParsedApi

logger = logging.getLogger(__name__)


def ensure_composite_models(parsed: ParsedApi) -> None:
    """Attach composed members to every composite model of *parsed*."""
    models_by_name = parsed.models_by_name()
    visited = VisitedSet()
    for model in parsed.models:
        _resolve(model, models_by_name, visited)


def _resolve(model: Model, models_by_name: dict[str, Model], visited: VisitedSet) -> None:
    if not model.is_composed or not visited.visit(model):
        return

    references = [p for p in model.properties if not p.name and p.kind == ModelKind.REFERENCE]
    primitives = [p for p in model.properties if not p.name and p.kind != ModelKind.REFERENCE]
    members = [models_by_name[r.type] for r in references if r.type in models_by_name]

    for member in members:
        _resolve(member, models_by_name, visited)

    if model.kind == ModelKind.ALL_OF:
        if primitives:
            raise InvalidCompositionError(model.name)
        members = _flatten(model, members)

    model.composed_models = members
    model.composed_primitives = primitives
    logger.debug(
        "Composite %s: %d models, %d primitives", model.name, len(members), len(primitives)
    )


def _flatten(model: Model, members: list[Model]) -> list[Model]:
    """Direct members followed by their own all-of members, without duplicates."""
    flattened: list[Model] = []
    seen = VisitedSet()
    seen.visit(model)
    for member in members:
        for candidate in [member, *(member.composed_models if member.kind == ModelKind.ALL_OF else [])]:
            if seen.visit(candidate):
                flattened.append(candidate)
    return flattened
