from datetime import datetime, timezone

import pytest

from html_to_pdf.augmenter import (
    COVER_END_MARKER,
    DocumentAugmenter,
    Insertion,
    InsertionPoint,
    apply_insertions,
)
from html_to_pdf.errors import ConversionError, ErrorCode
from html_to_pdf.layout import PageGeometry
from html_to_pdf.metadata import DocumentMetadata
from html_to_pdf.options import CoverConfig, MarginConfig, TOCConfig

DOCUMENT = """<html><head><title>Report</title></head>
<body class="doc">
<h1 id="intro">Introduction</h1>
<h2 id="scope">Scope &amp; Goals</h2>
<h3>Details</h3>
<h4 id="deep">Too deep</h4>
</body></html>"""


@pytest.fixture
def metadata():
    created = datetime(2024, 3, 1, tzinfo=timezone.utc)
    return DocumentMetadata(
        name="Report",
        created_at=created,
        modified_at=created,
        version="2.1.0",
        identifier="doc-1",
        author="Ada",
    )


@pytest.fixture
def augmenter():
    return DocumentAugmenter()


def test_default_cover_uses_metadata(augmenter, metadata):
    cover = augmenter.generate_cover(CoverConfig(), metadata)
    assert "Report" in cover
    assert "Ada" in cover
    assert "2024-03-01" in cover
    assert "v2.1.0" in cover
    assert cover.endswith(COVER_END_MARKER)


def test_cover_overrides_and_hidden_fields(augmenter, metadata):
    cover = augmenter.generate_cover(
        CoverConfig(title="Custom <Title>", subtitle="Sub", show_author=False, show_version=False),
        metadata,
    )
    assert "Custom &lt;Title&gt;" in cover
    assert "Sub" in cover
    assert "Ada" not in cover
    assert "v2.1.0" not in cover


def test_cover_template_substitution(augmenter, metadata):
    cover = augmenter.generate_cover(CoverConfig(template="<h2>{{title}} by {{ author }}</h2>"), metadata)
    assert "<h2>Report by Ada</h2>" in cover


def test_cover_template_unknown_placeholder_fails(augmenter, metadata):
    with pytest.raises(ConversionError) as exc_info:
        augmenter.generate_cover(CoverConfig(template="{{title}} {{publisher}}"), metadata)
    assert exc_info.value.code is ErrorCode.COVER_GENERATION_FAILED
    assert "publisher" in exc_info.value.message


def test_cover_goes_right_after_body_open(augmenter, metadata):
    document = augmenter.add_cover(DOCUMENT, CoverConfig(), metadata)
    assert document.index('<body class="doc">') < document.index("pdf-cover") < document.index("Introduction")


def test_headings_respect_max_depth(augmenter):
    entries = augmenter.collect_headings(DOCUMENT, TOCConfig(max_depth=2))
    assert [(e.level, e.text, e.anchor) for e in entries] == [
        (1, "Introduction", "intro"),
        (2, "Scope & Goals", "scope"),
    ]
    assert [e.page for e in entries] == [2, 3]


def test_headings_without_page_numbers(augmenter):
    entries = augmenter.collect_headings(DOCUMENT, TOCConfig(show_page_numbers=False))
    assert len(entries) == 3
    assert all(e.page is None for e in entries)


def test_invalid_depth_fails(augmenter):
    with pytest.raises(ConversionError) as exc_info:
        augmenter.collect_headings(DOCUMENT, TOCConfig(max_depth=0))
    assert exc_info.value.code is ErrorCode.TOC_GENERATION_FAILED


def test_toc_follows_cover(augmenter, metadata):
    document = augmenter.augment(
        DOCUMENT,
        metadata=metadata,
        geometry=PageGeometry("210mm", "297mm", preset="a4"),
        margin=MarginConfig("15mm", "15mm", "15mm", "15mm"),
        cover=CoverConfig(),
        toc=TOCConfig(),
    )
    cover_end = document.index(COVER_END_MARKER)
    toc_start = document.index('class="pdf-toc"')
    assert cover_end < toc_start < document.index('<h1 id="intro">')
    assert '<a href="#intro">Introduction</a>' in document


def test_toc_without_cover_goes_after_body(augmenter):
    document = augmenter.add_toc(DOCUMENT, TOCConfig())
    assert document.index('<body class="doc">') < document.index("pdf-toc") < document.index("<h1")


def test_cover_title_is_not_listed_in_toc(augmenter, metadata):
    document = augmenter.add_cover(DOCUMENT, CoverConfig(title="Cover Only"), metadata)
    entries = augmenter.collect_headings(document, TOCConfig())
    assert "Cover Only" not in [e.text for e in entries]


def test_print_style_in_head(augmenter):
    document = augmenter.add_print_style(
        DOCUMENT,
        PageGeometry("297mm", "210mm", orientation="landscape", preset="a4"),
        MarginConfig(top="20mm"),
    )
    head = document[:document.index("</head>")]
    assert "size: A4 landscape;" in head
    assert "margin: 20mm 15mm 15mm 15mm;" in head
    assert "print-color-adjust: exact" in head


def test_insertions_apply_in_order():
    document = apply_insertions("<html><head></head><body></body></html>", [
        Insertion(InsertionPoint.AFTER_BODY_OPEN, "A"),
        Insertion(InsertionPoint.AFTER_BODY_OPEN, "B"),
        Insertion(InsertionPoint.BEFORE_HEAD_CLOSE, "S"),
    ])
    assert document == "<html><head>S</head><body>BA</body></html>"


def test_augment_reports_each_block_before_building_it(augmenter, metadata):
    stages = []

    augmenter.augment(
        DOCUMENT,
        metadata=metadata,
        geometry=PageGeometry("210mm", "297mm", preset="a4"),
        margin=MarginConfig(),
        cover=CoverConfig(),
        toc=TOCConfig(),
        on_stage=stages.append,
    )

    assert stages == ["cover", "toc"]


def test_augment_stops_when_stage_callback_raises(augmenter, metadata):
    def stop(block):
        if block == "toc":
            raise ConversionError(ErrorCode.CANCELLED, "stop")

    with pytest.raises(ConversionError):
        augmenter.augment(
            DOCUMENT,
            metadata=metadata,
            geometry=PageGeometry("210mm", "297mm", preset="a4"),
            margin=MarginConfig(),
            cover=CoverConfig(),
            toc=TOCConfig(),
            on_stage=stop,
        )
