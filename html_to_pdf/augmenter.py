#!/usr/bin/env python3
"""
Document augmentation: cover page, table of contents and print stylesheet.

Augmentation is expressed as a list of insertion directives that are applied
to the document in order. The cover is spliced before the table of contents
is generated, since the TOC is positioned after the cover's end marker.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import html
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from .errors import ConversionError, ErrorCode
from .layout import PageGeometry
from .metadata import DocumentMetadata
from .options import CoverConfig, MARGIN_SIDES, MarginConfig, TOCConfig


DEFAULT_MARGIN = "15mm"

COVER_END_MARKER = "<!-- pdf-cover:end -->"
TOC_END_MARKER = "<!-- pdf-toc:end -->"

COVER_PLACEHOLDERS = ("title", "subtitle", "author", "date", "version")

_BODY_OPEN = re.compile(r'<body[^>]*>', re.IGNORECASE)
_HEAD_CLOSE = re.compile(r'</head\s*>', re.IGNORECASE)
_HEADING = re.compile(r'<h([1-6])([^>]*)>(.*?)</h\1\s*>', re.IGNORECASE | re.DOTALL)
_ID_ATTR = re.compile(r'\bid=["\']([^"\']+)["\']', re.IGNORECASE)
_PLACEHOLDER = re.compile(r'\{\{\s*(\w+)\s*\}\}')


class InsertionPoint(Enum):
    AFTER_BODY_OPEN = "after-body-open"
    AFTER_COVER = "after-cover"
    BEFORE_HEAD_CLOSE = "before-head-close"


@dataclass(frozen=True)
class Insertion:
    point: InsertionPoint
    markup: str


@dataclass(frozen=True)
class TocEntry:
    level: int
    text: str
    anchor: Optional[str] = None
    page: Optional[int] = None


def _insert_after_body_open(document: str, markup: str) -> str:
    match = _BODY_OPEN.search(document)
    if not match:
        return markup + document
    return document[:match.end()] + markup + document[match.end():]


def apply_insertion(document: str, insertion: Insertion) -> str:
    """Apply a single directive and return the new document."""
    if insertion.point is InsertionPoint.AFTER_BODY_OPEN:
        return _insert_after_body_open(document, insertion.markup)

    if insertion.point is InsertionPoint.AFTER_COVER:
        index = document.find(COVER_END_MARKER)
        if index == -1:
            return _insert_after_body_open(document, insertion.markup)
        end = index + len(COVER_END_MARKER)
        return document[:end] + insertion.markup + document[end:]

    match = _HEAD_CLOSE.search(document)
    if not match:
        return insertion.markup + document
    return document[:match.start()] + insertion.markup + document[match.start():]


def apply_insertions(document: str, insertions: List[Insertion]) -> str:
    for insertion in insertions:
        document = apply_insertion(document, insertion)
    return document


def _plain_text(fragment: str) -> str:
    text = re.sub(r'<[^>]+>', '', fragment)
    return " ".join(html.unescape(text).split())


class DocumentAugmenter:
    """Builds cover, TOC and print-style directives for a document."""

    def __init__(self, date_format: str = "%Y-%m-%d"):
        self.date_format = date_format

    # ---------- cover ----------

    def _cover_values(self, cover: CoverConfig, metadata: DocumentMetadata) -> Dict[str, str]:
        author = cover.author or metadata.author or ""
        return {
            "title": cover.title or metadata.name,
            "subtitle": cover.subtitle or "",
            "author": author,
            "date": metadata.created_at.strftime(self.date_format),
            "version": metadata.version,
        }

    def generate_cover(self, cover: CoverConfig, metadata: DocumentMetadata) -> str:
        """Return cover markup, followed by the cover end marker.

        Raises:
            ConversionError: COVER_GENERATION_FAILED for unknown template placeholders
        """
        values = self._cover_values(cover, metadata)

        if cover.template:
            unknown = sorted({name for name in _PLACEHOLDER.findall(cover.template)
                              if name not in COVER_PLACEHOLDERS})
            if unknown:
                raise ConversionError(
                    ErrorCode.COVER_GENERATION_FAILED,
                    f"Unknown cover template placeholder(s): {', '.join(unknown)}",
                )
            body = _PLACEHOLDER.sub(lambda m: html.escape(values[m.group(1)]), cover.template)
            return f'<section class="pdf-cover">{body}</section>{COVER_END_MARKER}'

        meta_items = []
        if cover.show_author and values["author"]:
            meta_items.append(html.escape(values["author"]))
        if cover.show_date:
            meta_items.append(html.escape(values["date"]))
        if cover.show_version:
            meta_items.append(f"v{html.escape(values['version'])}")

        parts = [
            '<section class="pdf-cover" style="height: 100vh; display: flex; flex-direction: column; '
            'justify-content: center; align-items: center; text-align: center; page-break-after: always;">',
            f'<div class="pdf-cover-title" style="font-size: 2.4em; font-weight: 600;">{html.escape(values["title"])}</div>',
        ]
        if values["subtitle"]:
            parts.append(f'<div class="pdf-cover-subtitle" style="font-size: 1.4em; margin-top: 0.6em; color: #555;">'
                         f'{html.escape(values["subtitle"])}</div>')
        if meta_items:
            parts.append(f'<div class="pdf-cover-meta" style="margin-top: 2em; color: #777;">{" · ".join(meta_items)}</div>')
        parts.append('</section>')
        return "\n".join(parts) + COVER_END_MARKER

    # ---------- table of contents ----------

    def collect_headings(self, document: str, toc: TOCConfig) -> List[TocEntry]:
        """Headings at or above `max_depth`, numbered from page 2 when enabled.

        Page numbers assume the cover is page 1 and each heading starts a new
        page; they are placeholders, not real pagination.
        """
        if toc.max_depth < 1:
            raise ConversionError(
                ErrorCode.TOC_GENERATION_FAILED,
                f"TOC max_depth must be at least 1 (got {toc.max_depth})",
            )

        entries = []
        page = 2
        for match in _HEADING.finditer(document):
            level = int(match.group(1))
            if level > toc.max_depth:
                continue
            anchor_match = _ID_ATTR.search(match.group(2))
            entries.append(TocEntry(
                level=level,
                text=_plain_text(match.group(3)),
                anchor=anchor_match.group(1) if anchor_match else None,
                page=page if toc.show_page_numbers else None,
            ))
            page += 1
        return entries

    def generate_toc(self, document: str, toc: TOCConfig) -> str:
        entries = self.collect_headings(document, toc)
        lines = [
            '<section class="pdf-toc" style="page-break-after: always;">',
            f'<div class="pdf-toc-title" style="font-size: 1.6em; font-weight: 600; margin-bottom: 1em;">{html.escape(toc.title)}</div>',
        ]
        for entry in entries:
            text = html.escape(entry.text)
            if entry.anchor:
                text = f'<a href="#{html.escape(entry.anchor)}">{text}</a>'
            page = f'<span class="pdf-toc-page" style="float: right;">{entry.page}</span>' if entry.page else ""
            indent = (entry.level - 1) * 1.5
            lines.append(f'<div class="pdf-toc-entry pdf-toc-level-{entry.level}" '
                         f'style="padding-left: {indent}em;">{text}{page}</div>')
        lines.append('</section>')
        return "\n".join(lines) + TOC_END_MARKER

    # ---------- print style ----------

    def generate_print_style(self, geometry: PageGeometry, margin: MarginConfig) -> str:
        margins = [getattr(margin, side) or DEFAULT_MARGIN for side in MARGIN_SIDES]
        return (
            '<style type="text/css" media="print">\n'
            '@page {\n'
            f'  size: {geometry.css_size()};\n'
            f'  margin: {" ".join(margins)};\n'
            '}\n'
            '* {\n'
            '  -webkit-print-color-adjust: exact !important;\n'
            '  print-color-adjust: exact !important;\n'
            '}\n'
            '.pdf-cover, .pdf-toc {\n'
            '  page-break-after: always;\n'
            '  break-after: page;\n'
            '}\n'
            '</style>'
        )

    # ---------- pipeline ----------

    def add_cover(self, document: str, cover: CoverConfig, metadata: DocumentMetadata) -> str:
        return apply_insertion(document, Insertion(InsertionPoint.AFTER_BODY_OPEN,
                                                   self.generate_cover(cover, metadata)))

    def add_toc(self, document: str, toc: TOCConfig) -> str:
        return apply_insertion(document, Insertion(InsertionPoint.AFTER_COVER,
                                                   self.generate_toc(document, toc)))

    def add_print_style(self, document: str, geometry: PageGeometry, margin: MarginConfig) -> str:
        return apply_insertion(document, Insertion(InsertionPoint.BEFORE_HEAD_CLOSE,
                                                   self.generate_print_style(geometry, margin)))

    def augment(
        self,
        document: str,
        *,
        metadata: DocumentMetadata,
        geometry: PageGeometry,
        margin: MarginConfig,
        cover: Optional[CoverConfig] = None,
        toc: Optional[TOCConfig] = None,
        on_stage: Optional[Callable[[str], None]] = None,
    ) -> str:
        """Splice cover, TOC and print style into the document, in that order.

        Pass `cover`/`toc` only when they should be generated. `on_stage` is
        called with "cover" or "toc" before that block is built; an exception
        it raises stops augmentation.
        """
        if cover is not None:
            if on_stage:
                on_stage("cover")
            document = self.add_cover(document, cover, metadata)
        if toc is not None:
            if on_stage:
                on_stage("toc")
            document = self.add_toc(document, toc)
        return self.add_print_style(document, geometry, margin)
