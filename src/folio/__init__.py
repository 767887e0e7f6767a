"""folio - flat-file markdown content engine.

Turns a tree of front-matter markdown files into routable, cacheable pages.
"""

__version__ = "0.1.0"
