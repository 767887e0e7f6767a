"""
Content module for folio sites.

Provides tools for:
- Parsing front matter in YAML, JSON and INI
- Compiling markdown through a filter pipeline, with an on-disk cache
- Indexing pages by route and resolving requests
- Ranked full-text search
- Building navigation menus and paginating lists
"""

from folio.content.filters import Filter, FilterPipeline
from folio.content.frontmatter import FrontMatterDocument, FrontMatterParser
from folio.content.index import ContentIndex
from folio.content.manager import ContentManager
from folio.content.menu import MenuBuilder, MenuNode
from folio.content.page import ContentFile, Page, PageFactory
from folio.content.pagination import Pagination
from folio.content.router import Router
from folio.content.search import Search, SearchResult

__all__ = [
    "ContentFile",
    "Page",
    "PageFactory",
    "ContentIndex",
    "ContentManager",
    "Router",
    "Search",
    "SearchResult",
    "MenuBuilder",
    "MenuNode",
    "Pagination",
    "Filter",
    "FilterPipeline",
    "FrontMatterParser",
    "FrontMatterDocument",
]
