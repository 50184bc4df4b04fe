"""
Parser for the structured JSON export.

The export carries two arrays: ``groups`` ({id, name}) and ``sites``
({id, group_id, name, url, description, notes, created_at}). Every site
becomes a link item tagged with the name of its group.
"""

import json
import logging
import math
from datetime import timezone
from typing import Any, List, Optional

import dateparser

from mind_vault.config import IMPORTED_GROUP, UNTITLED
from mind_vault.errors import FormatError
from mind_vault.models import VaultItem, now_ms

logger = logging.getLogger(__name__)

DATEPARSER_SETTINGS = {
    "TIMEZONE": "UTC",
    "TO_TIMEZONE": "UTC",
    "RETURN_AS_TIMEZONE_AWARE": True,
}


def parse_created_at(value: Any) -> Optional[int]:
    """
    Convert a created_at value to epoch milliseconds.

    Numbers are taken as epoch milliseconds already. Strings go through
    dateparser. Returns None when nothing usable comes out.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return int(value)
        except (ValueError, OverflowError):
            return None
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = dateparser.parse(value, settings=DATEPARSER_SETTINGS)
    except Exception as e:
        logger.debug(f"dateparser rejected {value!r}: {e}")
        return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def _is_key(value: Any) -> bool:
    """Whether a JSON value can identify a group (lists and objects cannot)."""
    return not isinstance(value, (list, dict))


def _join_summary(*parts: Any) -> str:
    return "\n".join(p for p in parts if isinstance(p, str) and p.strip() != "")


def parse_structured_export(text: str) -> List[VaultItem]:
    """
    Parse a structured export document into link items.

    Args:
        text: Raw JSON document

    Returns:
        One link item per site record, in document order

    Raises:
        FormatError: If the document is not JSON, or groups/sites are
            missing, not arrays, or hold non-object records
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error(f"Failed to parse structured export JSON: {e}")
        raise FormatError("Invalid file format: the JSON export could not be parsed") from e

    if not isinstance(data, dict):
        raise FormatError("Invalid file format: the JSON export must be an object")

    groups = data.get("groups")
    sites = data.get("sites")
    if not isinstance(groups, list) or not isinstance(sites, list):
        raise FormatError("Invalid file format: expected 'groups' and 'sites' arrays")

    group_names = {}
    for group in groups:
        if not isinstance(group, dict):
            raise FormatError("Invalid file format: group records must be objects")
        group_id = group.get("id")
        if not _is_key(group_id):
            logger.debug(f"Ignoring group with unusable id {group_id!r}")
            continue
        name = group.get("name")
        group_names[group_id] = str(name) if name else None

    items = []
    now = now_ms()
    for site in sites:
        if not isinstance(site, dict):
            raise FormatError("Invalid file format: site records must be objects")

        group_id = site.get("group_id")
        group_name = (group_names.get(group_id) if _is_key(group_id) else None) or IMPORTED_GROUP

        created_at = parse_created_at(site.get("created_at"))
        if created_at is None:
            if site.get("created_at"):
                logger.debug(
                    f"Unparseable created_at {site.get('created_at')!r} "
                    f"for site {site.get('id')}, using current time"
                )
            created_at = now

        items.append(
            VaultItem(
                type="link",
                content=str(site.get("url") or ""),
                title=str(site.get("name") or UNTITLED),
                summary=_join_summary(site.get("description"), site.get("notes")),
                tags=[group_name],
                created_at=created_at,
            )
        )

    logger.info(f"Parsed {len(items)} items from structured export ({len(group_names)} groups)")
    return items
