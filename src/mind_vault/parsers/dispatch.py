"""
Route an import file to the parser for its format.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Callable, List, Optional, Union

from mind_vault.errors import UnsupportedFormatError
from mind_vault.models import VaultItem
from mind_vault.parsers.bookmarks import parse_bookmark_export
from mind_vault.parsers.structured_export import parse_structured_export

logger = logging.getLogger(__name__)

Parser = Callable[[str], List[VaultItem]]

UNSUPPORTED_MESSAGE = (
    "Unsupported file type. Only .json (structured export) "
    "or .html (browser bookmarks) files can be imported"
)


def select_parser(filename: str, content_type: Optional[str] = None) -> Parser:
    """
    Pick a parser from the declared MIME type, falling back to the extension.

    Raises:
        UnsupportedFormatError: If neither identifies a supported format
    """
    name = (filename or "").lower()
    if content_type == "application/json" or name.endswith(".json"):
        return parse_structured_export
    if content_type == "text/html" or name.endswith(".html"):
        return parse_bookmark_export

    logger.warning(f"Rejected import file {filename!r} (content_type={content_type})")
    raise UnsupportedFormatError(UNSUPPORTED_MESSAGE)


def parse_import(
    filename: str, text: str, content_type: Optional[str] = None
) -> List[VaultItem]:
    """Parse the text of one import file into vault items."""
    parser = select_parser(filename, content_type)
    logger.debug(f"Parsing {filename!r} with {parser.__name__}")
    return parser(text)


def read_import_file(path: Union[str, Path]) -> List[VaultItem]:
    """Read an import file from disk and parse it."""
    path = Path(path)
    content_type, _ = mimetypes.guess_type(path.name)
    # Reject unsupported files before reading them
    select_parser(path.name, content_type)
    text = path.read_text(encoding="utf-8")
    return parse_import(path.name, text, content_type)
