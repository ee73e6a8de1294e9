import json

import pytest

from html_to_pdf.config import Config, get_config_from_env, load_config_file, parse_margin_shorthand
from html_to_pdf.converter import create_converter
from html_to_pdf.emitter import StaticEmitter

from conftest import FakeBackend


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HTML2PDF_PAGE_SIZE", "HTML2PDF_ORIENTATION", "HTML2PDF_MARGIN", "HTML2PDF_SCALE",
                 "HTML2PDF_INCLUDE_TOC", "HTML2PDF_WAIT_MS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"page_size": "a5", "orientation": "landscape", "scale": 0.8}))
    return path


@pytest.mark.parametrize("value,expected", [
    ("10mm", {"top": "10mm", "right": "10mm", "bottom": "10mm", "left": "10mm"}),
    ("10mm 20mm", {"top": "10mm", "right": "20mm", "bottom": "10mm", "left": "20mm"}),
    ("1mm 2mm 3mm 4mm", {"top": "1mm", "right": "2mm", "bottom": "3mm", "left": "4mm"}),
])
def test_margin_shorthand(value, expected):
    assert parse_margin_shorthand(value) == expected


def test_margin_shorthand_rejects_three_values():
    with pytest.raises(ValueError):
        parse_margin_shorthand("1mm 2mm 3mm")


def test_missing_or_broken_config_file(tmp_path):
    assert load_config_file(tmp_path / "absent.json") == {}
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert load_config_file(broken) == {}


def test_env_values_are_parsed(monkeypatch):
    monkeypatch.setenv("HTML2PDF_MARGIN", "1in 2in")
    monkeypatch.setenv("HTML2PDF_INCLUDE_TOC", "yes")
    monkeypatch.setenv("HTML2PDF_SCALE", "not-a-number")
    env = get_config_from_env()
    assert env["margin"]["right"] == "2in"
    assert env["include_toc"] is True
    assert "scale" not in env


def test_precedence_cli_over_env_over_file(monkeypatch, config_file):
    monkeypatch.setenv("HTML2PDF_PAGE_SIZE", "letter")
    monkeypatch.setenv("HTML2PDF_ORIENTATION", "portrait")

    config = Config(cli_args={"page_size": "a3", "scale": None}, config_file=config_file)

    assert config.get("page_size") == "a3"
    assert config.get("orientation") == "portrait"
    assert config.get("scale") == 0.8


def test_option_defaults_from_layers(config_file):
    config = Config(cli_args={"margin": "5mm"}, config_file=config_file)
    defaults = config.get_option_defaults()
    assert defaults.page_size == "a5"
    assert defaults.orientation == "landscape"
    assert defaults.margin.left == "5mm"
    assert defaults.include_cover is True


@pytest.mark.asyncio
async def test_converter_uses_configured_defaults(config_file, quiet_logger):
    backend = FakeBackend()
    converter = create_converter(
        emitter=StaticEmitter(),
        backend=backend,
        config=Config(config_file=config_file),
        logger=quiet_logger,
    )

    result = await converter.convert({"index.html": "<h1>x</h1>"}, {"wait_ms": 0})

    assert result.success
    settings = backend.print_settings[0]
    assert (settings.width, settings.height) == ("210mm", "148mm")
    assert settings.scale == 0.8


def test_sources_are_tracked(monkeypatch, config_file):
    monkeypatch.setenv("HTML2PDF_WAIT_MS", "250")
    config = Config(cli_args={"page_size": "legal"}, config_file=config_file)
    assert config.source_of("page_size") == "cli"
    assert config.source_of("wait_ms") == "env"
    assert config.source_of("scale") == "file"
    assert config.source_of("include_toc") == "default"


@pytest.mark.asyncio
async def test_badly_typed_config_file_fails_the_result(tmp_path, quiet_logger):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"scale": "1.5"}))
    backend = FakeBackend()
    converter = create_converter(emitter=StaticEmitter(), backend=backend,
                                 config=Config(config_file=path), logger=quiet_logger)

    result = await converter.convert({"index.html": "<h1>x</h1>"}, {"wait_ms": 0})

    assert not result.success
    assert backend.sessions == []
