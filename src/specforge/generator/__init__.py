"""Generator -- project, normalize and assemble the enriched graph.

Sub-modules:

* :mod:`~specforge.generator.naming` -- casing helpers and the per-target
  reserved-word rules.
* :mod:`~specforge.generator.projection` -- TypeScript, Java and Python
  names and type expressions for every node.
* :mod:`~specforge.generator.operations` -- response aliasing, parameter
  naming and collection formats, operation and service ordering.
* :mod:`~specforge.generator.assembler` -- :func:`compile_document`, the
  whole pipeline from document to :class:`~specforge.models.RenderData`.

Nothing is re-exported here: the parser imports
:mod:`~specforge.generator.naming`, and the assembler imports the parser.
"""
