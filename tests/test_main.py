import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

import main

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for var in ("LOG_FILE", "RASTERIZER", "INKSCAPE_COMMAND", "EXPORT_WIDTH", "EXPORT_HEIGHT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(main, "load_dotenv", lambda: None)


@pytest.fixture
def config(slide_svg: Path) -> Path:
    cfg = slide_svg.parent / "slides.yaml"
    cfg.write_text(
        "- filename: slide.svg\n"
        "  layers:\n"
        "    - suffix: _1\n"
        "      hide_ids: [b2, b3]\n"
        "    - suffix: _2\n"
        "      show_ids: [b2]\n",
        encoding="utf-8",
    )
    return cfg


def test_wrong_argument_count():
    res = runner.invoke(main.app, ["only-one.yaml"])
    assert res.exit_code == 2


def test_success(monkeypatch: pytest.MonkeyPatch, config: Path, out_dir: Path, rasterizer):
    chosen = []

    def fake_build(name, settings):
        chosen.append(name)
        return rasterizer

    monkeypatch.setattr(main, "build_rasterizer", fake_build)
    res = runner.invoke(main.app, [str(config), str(out_dir)])
    assert res.exit_code == 0, res.output
    assert chosen == ["inkscape"]
    assert [c[1].name for c in rasterizer.calls] == ["slide_1.png", "slide_2.png"]
    assert all(c[2:] == (1280, 720) for c in rasterizer.calls)


def test_rasterizer_option_overrides_setting(
    monkeypatch: pytest.MonkeyPatch, config: Path, out_dir: Path, rasterizer
):
    monkeypatch.setenv("RASTERIZER", "inkscape")
    chosen = []

    def fake_build(name, settings):
        chosen.append(name)
        return rasterizer

    monkeypatch.setattr(main, "build_rasterizer", fake_build)
    res = runner.invoke(main.app, [str(config), str(out_dir), "--rasterizer", "cairosvg"])
    assert res.exit_code == 0, res.output
    assert chosen == ["cairosvg"]


def test_missing_output_dir_fails(
    config: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture
):
    with caplog.at_level(logging.ERROR):
        res = runner.invoke(main.app, [str(config), str(tmp_path / "nowhere")])
    assert res.exit_code == 1
    assert "Destination dir needs to exist" in caplog.text


def test_lookup_failure_exits_nonzero(
    monkeypatch: pytest.MonkeyPatch,
    slide_svg: Path,
    out_dir: Path,
    rasterizer,
    caplog: pytest.LogCaptureFixture,
):
    cfg = slide_svg.parent / "bad.yaml"
    cfg.write_text("- filename: slide.svg\n  layers: [{suffix: _1, hide_ids: [zz]}]\n")
    monkeypatch.setattr(main, "build_rasterizer", lambda name, settings: rasterizer)
    with caplog.at_level(logging.ERROR):
        res = runner.invoke(main.app, [str(cfg), str(out_dir)])
    assert res.exit_code == 1
    assert "Expected one #zz element; found 0" in caplog.text
    assert list(out_dir.iterdir()) == []


def test_unknown_rasterizer(config: Path, out_dir: Path, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.ERROR):
        res = runner.invoke(main.app, [str(config), str(out_dir), "-r", "gimp"])
    assert res.exit_code == 1
    assert "Unknown rasterizer" in caplog.text
