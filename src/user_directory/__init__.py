"""User directory dashboard backend.

Searchable, paginated user directory with address records, multi-tier
cached search results and a "user updated" notification feed.
"""

__version__ = "0.1.0"
