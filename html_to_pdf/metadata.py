#!/usr/bin/env python3
"""
Document metadata recovered from the emitted assets.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import html
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional, Union

ROOT_DOCUMENT = "index.html"

DEFAULT_TITLE = "Untitled Document"
DEFAULT_VERSION = "1.0.0"

_TITLE_PATTERN = re.compile(r'<title[^>]*>(.*?)</title>', re.IGNORECASE | re.DOTALL)
_META_PATTERN = re.compile(r'<meta\s+[^>]*>', re.IGNORECASE)
_ATTR_PATTERN = re.compile(r'([\w-]+)\s*=\s*["\']([^"\']*)["\']')


@dataclass(frozen=True)
class DocumentMetadata:
    name: str
    created_at: datetime
    modified_at: datetime
    version: str
    identifier: str
    author: Optional[str] = None


def _meta_tags(document: str) -> dict:
    found = {}
    for tag in _META_PATTERN.findall(document):
        attrs = {key.lower(): value for key, value in _ATTR_PATTERN.findall(tag)}
        name = attrs.get("name", "").lower()
        if name and "content" in attrs:
            found.setdefault(name, html.unescape(attrs["content"]).strip())
    return found


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def extract_metadata(files: Mapping[str, Union[str, bytes]]) -> DocumentMetadata:
    """Derive metadata from the root document.

    Preference order for each field:
    1) The root document's <title> or matching <meta name=...> tag
    2) Fixed fallbacks: "Untitled Document", current time, "1.0.0", a new UUID

    Never raises.
    """
    document = files.get(ROOT_DOCUMENT)
    if not isinstance(document, str):
        document = ""

    title = None
    match = _TITLE_PATTERN.search(document)
    if match:
        # Strip any markup and collapse whitespace inside <title>
        text = re.sub(r'<[^>]+>', '', match.group(1))
        title = " ".join(html.unescape(text).split()) or None

    meta = _meta_tags(document)
    now = datetime.now(timezone.utc)
    created = _parse_timestamp(meta.get("created")) or now
    modified = _parse_timestamp(meta.get("modified")) or created

    return DocumentMetadata(
        name=title or DEFAULT_TITLE,
        created_at=created,
        modified_at=modified,
        version=meta.get("version") or DEFAULT_VERSION,
        identifier=meta.get("identifier") or str(uuid.uuid4()),
        author=meta.get("author") or None,
    )
