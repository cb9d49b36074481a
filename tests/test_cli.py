"""End-to-end tests for the command-line interface."""
from __future__ import annotations

import logging

import pytest
from PIL import Image

from snapframe import main as cli
from snapframe.main import LOGGER_NAME, main
from snapframe.workers import RenderQueue


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def photo(tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGB", (100, 50), "red").save(path)
    return path


def test_layouts_lists_templates(capsys):
    assert main(["layouts"]) == 0
    out = capsys.readouterr().out
    assert "four-grid" in out
    assert "single" in out


def test_edit_resizes_and_writes_output(photo, tmp_path):
    output = tmp_path / "out.png"
    assert main(["edit", str(photo), "--crop", "0,0,50,50", "--size", "20x10", "-o", str(output)]) == 0
    with Image.open(output) as result:
        assert result.size == (20, 10)
    assert (tmp_path / "snapframe.log").exists()


def test_edit_warns_when_budget_is_exceeded(tmp_path, capsys):
    noisy = tmp_path / "noise.png"
    Image.effect_noise((64, 64), 80).convert("RGB").save(noisy)
    output = tmp_path / "out.png"
    assert main(["edit", str(noisy), "--max-kb", "1", "-o", str(output)]) == 0
    assert "over the 1024 byte budget" in capsys.readouterr().err


def test_edit_missing_input_fails(tmp_path):
    assert main(["edit", str(tmp_path / "nope.png"), "-o", str(tmp_path / "out.png")]) == 1


def test_collage_renders_layout(photo, tmp_path):
    output = tmp_path / "collage.jpg"
    argv = [
        "collage",
        "--layout", "split-horizontal",
        "--size", "200x100",
        "--image", f"cell-1={photo}",
        "--image", f"cell-2={photo}",
        "--zoom", "cell-2=2",
        "--pan", "cell-2=5,-5",
        "--quality", "0.7",
        "-o", str(output),
    ]
    assert main(argv) == 0
    with Image.open(output) as result:
        assert result.format == "JPEG"
        assert result.size == (200, 100)


def test_collage_unknown_cell_fails(photo, tmp_path):
    argv = ["collage", "--image", f"cell-9={photo}", "-o", str(tmp_path / "c.png")]
    assert main(argv) == 1


def test_presets_add_list_delete(tmp_path, capsys):
    store = tmp_path / "presets.json"
    assert main(["presets", "--store", str(store), "add", "300x200", "Banner"]) == 0
    assert "Custom[0]\tBanner\t300x200" in capsys.readouterr().out
    assert main(["presets", "--store", str(store), "delete", "0"]) == 0
    assert "Custom[0]" not in capsys.readouterr().out
    assert main(["presets", "--store", str(store), "delete", "3"]) == 1


def test_bad_size_argument_exits():
    with pytest.raises(SystemExit):
        main(["presets", "add", "wide"])


class RecordingQueue(RenderQueue):
    def __init__(self):
        super().__init__()
        self.jobs = []

    def submit(self, target, fn, *args, **kwargs):
        future = super().submit(target, fn, *args, **kwargs)
        self.jobs.append((target, args, future))
        return future


@pytest.fixture
def queues(monkeypatch):
    created = []

    def factory():
        queue = RecordingQueue()
        created.append(queue)
        return queue

    monkeypatch.setattr(cli, "RenderQueue", factory)
    return created


def test_edit_export_runs_on_render_queue(photo, tmp_path, queues):
    assert main(["edit", str(photo), "-o", str(tmp_path / "out.jpg")]) == 0
    [(target, (settings,), future)] = queues[0].jobs
    assert target == "edit-export"
    assert settings.quality == 0.9
    assert future.result().quality == 0.9


def test_collage_export_runs_on_render_queue(photo, tmp_path, queues):
    argv = ["collage", "--image", f"cell-1={photo}", "-o", str(tmp_path / "c.jpg")]
    assert main(argv) == 0
    [(target, (settings,), _)] = queues[0].jobs
    assert target == "collage-export"
    assert settings.quality == 1.0


def test_explicit_quality_overrides_default(photo, tmp_path, queues):
    argv = ["edit", str(photo), "--quality", "0.5", "-o", str(tmp_path / "out.jpg")]
    assert main(argv) == 0
    assert queues[0].jobs[0][1][0].quality == 0.5
