"""
Format parsers turning external export files into vault items.

- parse_structured_export: JSON export with groups and sites
- parse_bookmark_export: browser bookmark HTML with nested folders
- parse_import / read_import_file: dispatch by MIME type or extension
"""

from mind_vault.parsers.bookmarks import BookmarkEntry, extract_bookmarks, parse_bookmark_export
from mind_vault.parsers.dispatch import parse_import, read_import_file, select_parser
from mind_vault.parsers.structured_export import parse_created_at, parse_structured_export

__all__ = [
    "BookmarkEntry",
    "extract_bookmarks",
    "parse_bookmark_export",
    "parse_structured_export",
    "parse_created_at",
    "parse_import",
    "read_import_file",
    "select_parser",
]
