from datetime import datetime, timezone

from html_to_pdf.metadata import DEFAULT_TITLE, DEFAULT_VERSION, extract_metadata


def test_title_and_meta_tags():
    document = """<html><head>
    <title>  Annual
      Report &amp; Summary </title>
    <meta name="author" content="Grace">
    <meta name="version" content="3.0.1">
    <meta name="created" content="2024-01-15T10:00:00Z">
    <meta name="identifier" content="card-42">
    </head><body></body></html>"""
    metadata = extract_metadata({"index.html": document})
    assert metadata.name == "Annual Report & Summary"
    assert metadata.author == "Grace"
    assert metadata.version == "3.0.1"
    assert metadata.identifier == "card-42"
    assert metadata.created_at == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
    assert metadata.modified_at == metadata.created_at


def test_fallbacks_without_root_document():
    metadata = extract_metadata({"style.css": "body {}"})
    assert metadata.name == DEFAULT_TITLE
    assert metadata.version == DEFAULT_VERSION
    assert metadata.author is None
    assert metadata.identifier


def test_unparseable_dates_fall_back_to_now():
    document = '<meta name="created" content="last tuesday">'
    before = datetime.now(timezone.utc)
    metadata = extract_metadata({"index.html": document})
    assert metadata.created_at >= before


def test_identifiers_differ_between_calls():
    first = extract_metadata({"index.html": "<p></p>"})
    second = extract_metadata({"index.html": "<p></p>"})
    assert first.identifier != second.identifier
