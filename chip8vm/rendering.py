"""CHIP-8 rendering utilities for visualization."""

from typing import Tuple

import cv2
import numpy as np

from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT


def framebuffer_to_rgb(
    display,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (255, 255, 255),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert a CHIP-8 framebuffer to an RGB array with optional upscaling.

    Args:
        display: Array of shape (64, 32) indexed [x, y], truthy for lit pixels
        scale: Upscaling factor (default: 8x)
        on_color: RGB color for lit pixels (default: white)
        off_color: RGB color for unlit pixels (default: black)

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    pixels = np.asarray(display).astype(np.bool_)
    if pixels.shape != (SCREEN_WIDTH, SCREEN_HEIGHT):
        raise ValueError(f"Expected display shape ({SCREEN_WIDTH}, {SCREEN_HEIGHT}), got {pixels.shape}")

    # (64 width, 32 height) -> (32 rows, 64 columns)
    pixels = pixels.T

    rgb_frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


COLOR_SCHEMES = {
    "classic": ((255, 255, 255), (0, 0, 0)),  # White on black
    "green": ((0, 255, 0), (0, 0, 0)),
    "amber": ((255, 176, 0), (0, 0, 0)),
    "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
    "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
}


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
        )

    return COLOR_SCHEMES[scheme]


def create_video(
        displays,
        filename: str,
        fps: float = 60.0,
        scale: int = 8,
        color_scheme: str = "classic",
) -> int:
    """Write a stack of displays of shape (N, 64, 32) to an MP4 file.

    Returns:
        Number of frames written
    """
    displays = np.asarray(displays)
    if len(displays.shape) != 3 or displays.shape[1:] != (SCREEN_WIDTH, SCREEN_HEIGHT):
        raise ValueError(f"Expected display shape (N, {SCREEN_WIDTH}, {SCREEN_HEIGHT}), got {displays.shape}")

    on_color, off_color = create_color_scheme(color_scheme)
    height, width = SCREEN_HEIGHT * scale, SCREEN_WIDTH * scale

    fourcc = cv2.VideoWriter_fourcc(*'mp4v')
    writer = cv2.VideoWriter(filename, fourcc, fps, (width, height))
    try:
        for frame_display in displays:
            frame = framebuffer_to_rgb(frame_display, scale, on_color, off_color)
            writer.write(cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
    finally:
        writer.release()

    return len(displays)
