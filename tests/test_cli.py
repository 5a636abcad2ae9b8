"""End-to-end runs of the command line entry point."""

import json

import pytest

from PIL import Image

from mandelcanvas.cli import apply_overrides, build_arg_parser, main
from mandelcanvas.config import load_config, normalise_config
from mandelcanvas.pipeline import request_from_config
from mandelcanvas.viewport import map_pixel


def _render_args(tmp_path, *extra):
    return [
        "--log-file", "",
        "render",
        "--output", str(tmp_path / "out.png"),
        "--manifest", str(tmp_path / "run.json"),
        *extra,
    ]


def test_render_writes_png_and_manifest(tmp_path):
    rc = main(_render_args(tmp_path, "--width", "8", "--height", "6", "--centered", "--max-iterations", "50"))
    assert rc == 0
    with Image.open(tmp_path / "out.png") as img:
        assert img.size == (8, 6)
        assert img.mode == "RGBA"
    manifest = json.loads((tmp_path / "run.json").read_text(encoding="utf-8"))
    assert manifest["config"]["width"] == 8
    assert manifest["config"]["centered"] is True
    assert manifest["result"]["bytes"] == 8 * 6 * 4


def test_render_with_workers_and_policy(tmp_path):
    rc = main(_render_args(
        tmp_path, "--width", "9", "--height", "7", "--centered", "--max-iterations", "40",
        "--workers", "2", "--band-height", "3", "--policy", "saturation",
    ))
    assert rc == 0
    with Image.open(tmp_path / "out.png") as img:
        assert img.size == (9, 7)


def test_render_from_config_file(tmp_path):
    cfg = tmp_path / "cfg.json"
    cfg.write_text(json.dumps({"width": 4, "height": 3, "max_iterations": 20, "centered": True}), encoding="utf-8")
    rc = main(["--config", str(cfg), "--log-file", "", "render",
               "--output", str(tmp_path / "out.png"), "--manifest", "", "--height", "5"])
    assert rc == 0
    with Image.open(tmp_path / "out.png") as img:
        assert img.size == (4, 5)
    assert not (tmp_path / "run.json").exists()


def test_invalid_dimensions_exit_code(tmp_path):
    rc = main(_render_args(tmp_path, "--width", "0", "--height", "5"))
    assert rc == 2
    assert not (tmp_path / "out.png").exists()


def test_invalid_scale_exit_code(tmp_path):
    rc = main(_render_args(tmp_path, "--width", "5", "--height", "5", "--scale", "0"))
    assert rc == 2
    assert not (tmp_path / "out.png").exists()


def test_info(tmp_path):
    assert main(["--log-file", "", "info"]) == 0


def test_log_file_is_written(tmp_path):
    log_file = tmp_path / "render.log"
    rc = main(["--log-file", str(log_file), "render", "--width", "2", "--height", "2",
               "--max-iterations", "10", "--output", str(tmp_path / "o.png"), "--manifest", ""])
    assert rc == 0
    assert "Saved frame" in log_file.read_text(encoding="utf-8")


def test_centered_render_frames_whole_set(tmp_path):
    args = build_arg_parser().parse_args(["render", "--width", "800", "--height", "600", "--centered"])
    request = request_from_config(normalise_config(apply_overrides(load_config(None), args)))
    left = map_pixel(0, 0, 800, 600, request.transform)
    right = map_pixel(799, 599, 800, 600, request.transform)
    assert left.real == pytest.approx(-2.2222222)
    assert left.imag == pytest.approx(-1.25)
    assert right.real > 0.5
    assert right.imag > 1.2
