"""Built-in CLI sub-commands for specforge.

* :mod:`~specforge.commands.generate` -- compile a document and render
  template sets into files.
* :mod:`~specforge.commands.inspect` -- list the models, operations and
  services of the compiled graph.

``generate`` is a plain callback registered on the root app; ``inspect``
is a :class:`typer.Typer` sub-application.
"""
