"""Console logging utilities for the chip8vm host driver.

The machine core never logs; only hosts (``main.py``) use these loggers.
Headless runs report progress through a ``tqdm`` bar.
"""

import sys
import time
from typing import Any, Dict, Optional

from tqdm import tqdm

LOG_LEVELS = ("DEBUG", "INFO", "ERROR")

_COLORS = {"DEBUG": "\033[36m", "INFO": "\033[32m", "ERROR": "\033[31m"}
_RESET = "\033[0m"


class RunLogger:
    """Leveled console logger for emulator runs.

    Lines look like ``[   1.25s][    INFO][chip8vm] message``; the level tag is
    colored when stdout is a terminal.
    """

    def __init__(self, name: str = "chip8vm", log_level: str = "INFO", use_colors: bool = True):
        level = log_level.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LOG_LEVELS)}")
        self.name = name
        self.threshold = LOG_LEVELS.index(level)
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.start_time = time.time()
        self.run_start: Optional[float] = None

    def log(self, level: str, message: str):
        if LOG_LEVELS.index(level) < self.threshold:
            return
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{_COLORS[level]}{tag}{_RESET}"
        print(f"[{time.time() - self.start_time:8.2f}s]{tag}[{self.name}] {message}", flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def log_run_start(self, rom: str, config: Dict[str, Any]):
        self.run_start = time.time()
        self.info("=" * 60)
        self.info(f"Running {rom}")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_run_end(self, instructions: int):
        elapsed = time.time() - (self.run_start or self.start_time)
        rate = instructions / elapsed if elapsed > 0 else 0.0
        self.info(
            f"Executed {instructions:,} instructions in {elapsed:.2f}s ({rate:,.0f} instructions/s)"
        )

    def log_registers(self, V, pc: int, I: int):
        """Dump the register file at DEBUG level."""
        registers = " ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(V))
        self.debug(f"pc=0x{pc:03X} I=0x{I:03X} {registers}")


def frame_progress(num_frames: int, desc: Optional[str] = None, **kwargs) -> tqdm:
    """Progress bar for headless runs, counted in frames."""
    if desc is None:
        desc = f"Emulating ({num_frames:,} frames)"
    return tqdm(total=num_frames, desc=desc, unit="frame", **kwargs)
