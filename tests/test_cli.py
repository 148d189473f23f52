import json

import pygame
import pytest

from pixelpad.buffer import PixelBuffer
from pixelpad.cli import build_parser, main

RED = (255, 0, 0, 255)
DARK_RED = (200, 0, 0, 255)
BLUE = (0, 0, 255, 255)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"data_root: {tmp_path / 'data'}\n", encoding="utf-8")
    monkeypatch.setenv("PIXELPAD_CONFIG", str(config_path))
    return tmp_path


def _write_png(path, rows):
    pygame.image.save(PixelBuffer.from_rows(rows).to_surface(), str(path))
    return path


def test_reduce_command_parses_options():
    args = build_parser().parse_args(["reduce", "in.png", "out.png", "--colors", "4", "--algorithm", "k-means", "--dither"])
    assert args.command == "reduce"
    assert args.colors == 4
    assert args.algorithm == "k-means"
    assert args.dither is True


def test_unknown_algorithm_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["palette", "in.png", "--algorithm", "octree"])


def test_count_command(isolated_config, capsys):
    image = _write_png(isolated_config / "in.png", [[RED, DARK_RED, BLUE], [RED, (0, 0, 0, 0), BLUE]])
    assert main(["count", str(image)]) == 0
    assert capsys.readouterr().out.strip() == "3"


def test_palette_command_prints_hex(isolated_config, capsys):
    image = _write_png(isolated_config / "in.png", [[RED, RED, BLUE]])
    assert main(["palette", str(image), "--algorithm", "frequency", "--colors", "2"]) == 0
    assert json.loads(capsys.readouterr().out) == ["#ff0000", "#0000ff"]


def test_reduce_command_writes_output(isolated_config):
    image = _write_png(isolated_config / "in.png", [[RED, DARK_RED, BLUE, BLUE]])
    output = isolated_config / "out.png"
    assert main(["reduce", str(image), str(output), "--colors", "2", "--algorithm", "frequency"]) == 0

    reduced = PixelBuffer.from_surface(pygame.image.load(str(output)))
    assert reduced.size == (4, 1)
    assert list(reduced.pixels()) == [RED, RED, BLUE, BLUE]
    assert not list(isolated_config.glob("*.tmp.png"))
    assert (isolated_config / "data" / "logs").is_dir()


def test_missing_input_returns_error(isolated_config, capsys):
    assert main(["count", str(isolated_config / "missing.png")]) == 1
    assert "cannot read image" in capsys.readouterr().err


def test_reduce_without_extension_still_writes_png(isolated_config):
    image = _write_png(isolated_config / "in.png", [[RED, BLUE]])
    output = isolated_config / "out"
    assert main(["reduce", str(image), str(output), "--colors", "2"]) == 0
    assert output.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
    assert sorted(p.name for p in isolated_config.iterdir() if p.name.startswith("out")) == ["out"]


def test_bad_arguments_exit_before_creating_directories(isolated_config):
    with pytest.raises(SystemExit):
        main(["count"])
    assert not (isolated_config / "data").exists()


def test_unwritable_data_root_returns_error(tmp_path, monkeypatch, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"data_root: {blocker / 'data'}\n", encoding="utf-8")
    monkeypatch.setenv("PIXELPAD_CONFIG", str(config_path))
    image = _write_png(tmp_path / "in.png", [[RED]])

    assert main(["count", str(image)]) == 1
    assert "cannot create data directory" in capsys.readouterr().err
