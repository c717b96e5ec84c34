"""Tests for framebuffer rendering helpers."""

import numpy as np
import pytest
from chip8vm.rendering import framebuffer_to_rgb, create_color_scheme, create_video


def test_framebuffer_to_rgb_layout():
    display = np.zeros((64, 32), dtype=np.uint8)
    display[5, 2] = 1

    frame = framebuffer_to_rgb(display, scale=1, on_color=(1, 2, 3), off_color=(9, 9, 9))

    assert frame.shape == (32, 64, 3)
    assert frame.dtype == np.uint8
    assert tuple(frame[2, 5]) == (1, 2, 3)
    assert tuple(frame[0, 0]) == (9, 9, 9)


def test_framebuffer_to_rgb_scaling():
    display = np.ones((64, 32), dtype=bool)
    frame = framebuffer_to_rgb(display, scale=4)
    assert frame.shape == (128, 256, 3)
    assert (frame == 255).all()


def test_framebuffer_wrong_shape():
    with pytest.raises(ValueError):
        framebuffer_to_rgb(np.zeros((32, 64)))


def test_color_schemes():
    assert create_color_scheme("classic") == ((255, 255, 255), (0, 0, 0))
    with pytest.raises(ValueError):
        create_color_scheme("plaid")


def test_create_video_rejects_bad_shape(tmp_path):
    with pytest.raises(ValueError):
        create_video(np.zeros((64, 32)), str(tmp_path / "out.mp4"))


def test_create_video_writes_every_frame(tmp_path):
    displays = np.zeros((3, 64, 32), dtype=bool)
    displays[1, :8, :5] = True
    filename = tmp_path / "run.mp4"

    written = create_video(displays, str(filename), fps=30, scale=2, color_scheme="green")

    assert written == 3
    assert filename.stat().st_size > 0
