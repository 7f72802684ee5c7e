"""Template rendering and file emission.

* :mod:`~specforge.render.templates` -- resolves template sets and renders
  them with jinja2 on a thread pool.
* :mod:`~specforge.render.writer` -- splits rendered output into files on
  the sentinel protocol, cleans the previous run's files and writes the
  new ones.
"""

from specforge.render.templates import collect_templates, render_templates
from specforge.render.writer import emit_files

__all__ = ["collect_templates", "render_templates", "emit_files"]
