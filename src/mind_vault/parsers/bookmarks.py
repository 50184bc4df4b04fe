"""
Parser for browser bookmark exports (Netscape bookmark HTML).

Exports nest folders as ``<DT><H3>Folder</H3><DL>...</DL>``. Browsers write
them without closing tags, so the markup is parsed leniently and every
link's folder path is recovered by walking up through its enclosing
``<DL>`` lists. Each link becomes a BookmarkEntry carrying that path, and
the path (root folder first) becomes the item's tags.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from mind_vault.config import IMPORTED_BOOKMARKS, UNTITLED
from mind_vault.errors import FormatError
from mind_vault.models import VaultItem, now_ms

logger = logging.getLogger(__name__)

# Hrefs with these schemes do not point at a page (Firefox smart folders, bookmarklets)
NON_NAVIGABLE_SCHEMES = ("place:", "javascript:")

UNNAMED_FOLDER = "Folder"


@dataclass(frozen=True)
class BookmarkEntry:
    """
    A navigable link found in a bookmark export.

    Attributes:
        href: Link target
        title: Link text (may be empty)
        add_date: Raw ADD_DATE attribute (Unix seconds), if any
        folder_path: Enclosing folder names, root-most first
    """

    href: str
    title: str
    add_date: Optional[str]
    folder_path: tuple[str, ...]


def _is_navigable(href: Optional[str]) -> bool:
    if not href:
        return False
    return not href.strip().lower().startswith(NON_NAVIGABLE_SCHEMES)


def _folder_heading(folder_list: Tag) -> Optional[str]:
    """Find the heading naming a <dl> folder list, if there is one."""
    parent = folder_list.parent
    if isinstance(parent, Tag) and parent.name == "dt":
        heading = parent.find("h3")
        if heading is not None:
            return heading.get_text().strip() or UNNAMED_FOLDER
        return None

    previous = folder_list.find_previous_sibling()
    if isinstance(previous, Tag) and previous.name == "h3":
        return previous.get_text().strip() or UNNAMED_FOLDER
    return None


def folder_path_for(link: Tag) -> tuple[str, ...]:
    """Names of the folders enclosing a link, root-most first."""
    path: List[str] = []
    for ancestor in link.parents:
        if ancestor.name != "dl":
            continue
        heading = _folder_heading(ancestor)
        if heading is not None:
            path.insert(0, heading)
    return tuple(path)


def extract_bookmarks(text: str) -> List[BookmarkEntry]:
    """
    Extract every navigable link, with its folder path, in document order.

    Raises:
        FormatError: If the markup cannot be parsed at all
    """
    try:
        soup = BeautifulSoup(text, "html.parser")
    except Exception as e:
        logger.error(f"Failed to parse bookmark export: {e}")
        raise FormatError("Invalid file format: the bookmark export could not be parsed") from e

    entries = []
    skipped = 0
    for link in soup.find_all("a"):
        href = link.get("href")
        if not _is_navigable(href):
            skipped += 1
            continue

        entries.append(
            BookmarkEntry(
                href=href,
                title=link.get_text().strip(),
                add_date=link.get("add_date"),
                folder_path=folder_path_for(link),
            )
        )

    if skipped:
        logger.debug(f"Skipped {skipped} links without a navigable href")
    return entries


def _parse_add_date(add_date: Optional[str], default: int) -> int:
    if not add_date:
        return default
    try:
        return int(add_date.strip()) * 1000
    except ValueError:
        logger.debug(f"Unparseable add_date {add_date!r}, using current time")
        return default


def entry_to_item(entry: BookmarkEntry, now: Optional[int] = None) -> VaultItem:
    if now is None:
        now = now_ms()
    return VaultItem(
        type="link",
        content=entry.href,
        title=entry.title or UNTITLED,
        summary="",
        tags=list(entry.folder_path) or [IMPORTED_BOOKMARKS],
        created_at=_parse_add_date(entry.add_date, now),
    )


def parse_bookmark_export(text: str) -> List[VaultItem]:
    """
    Parse a bookmark export into link items tagged with their folder path.

    Args:
        text: Raw bookmark HTML

    Returns:
        One link item per navigable link, in document order

    Raises:
        FormatError: If the markup cannot be parsed at all
    """
    now = now_ms()
    items = [entry_to_item(entry, now) for entry in extract_bookmarks(text)]
    logger.info(f"Parsed {len(items)} items from bookmark export")
    return items
