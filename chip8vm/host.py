"""Command-line host driver: pygame window or headless batch run."""

import argparse
import dataclasses
import sys
import time
from typing import Optional, Sequence

import jax
import jax.numpy as jnp
import numpy as np
import pygame

from chip8vm.cartridge import read_cartridge
from chip8vm.constants import INSTRUCTION_FREQUENCY, TIMER_FREQUENCY, SCREEN_WIDTH, SCREEN_HEIGHT
from chip8vm.emulator import load_rom, run_frames
from chip8vm.errors import MachineError
from chip8vm.logging import LOG_LEVELS, RunLogger, frame_progress
from chip8vm.machine import Machine
from chip8vm.rendering import COLOR_SCHEMES, create_color_scheme, create_video, framebuffer_to_rgb
from chip8vm.state import create_state

# Keyboard layout of the COSMAC VIP hex pad:
#   1 2 3 C        1 2 3 4
#   4 5 6 D   <-   Q W E R
#   7 8 9 E        A S D F
#   A 0 B F        Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


@dataclasses.dataclass
class HostConfig:
    """Host-side settings; the machine itself only needs a seed."""
    rom_path: str
    instruction_frequency: int = INSTRUCTION_FREQUENCY
    timer_frequency: int = TIMER_FREQUENCY
    render_scale: int = 8
    color_scheme: str = "classic"
    seed: int = 0
    log_level: str = "INFO"
    headless: bool = False
    frames: int = 600
    record: Optional[str] = None

    def __post_init__(self):
        if self.instruction_frequency <= 0 or self.timer_frequency <= 0:
            raise ValueError("Frequencies must be positive")
        if self.render_scale < 1:
            raise ValueError(f"Render scale must be at least 1, got {self.render_scale}")
        if self.frames < 1:
            raise ValueError(f"Frame count must be at least 1, got {self.frames}")
        create_color_scheme(self.color_scheme)
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level '{self.log_level}'")

    @property
    def instructions_per_frame(self) -> int:
        return max(1, round(self.instruction_frequency / self.timer_frequency))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8vm", description="Run a CHIP-8 ROM.")
    parser.add_argument("rom_path", help="raw CHIP-8 program image")
    parser.add_argument("--frequency", dest="instruction_frequency", type=int,
                        default=INSTRUCTION_FREQUENCY, help="instructions per second")
    parser.add_argument("--scale", dest="render_scale", type=int, default=8)
    parser.add_argument("--colors", dest="color_scheme", default="classic", choices=sorted(COLOR_SCHEMES))
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--log-level", default="INFO", type=str.upper, choices=LOG_LEVELS)
    parser.add_argument("--headless", action="store_true", help="run without a window")
    parser.add_argument("--frames", type=int, default=600, help="frames to run when headless")
    parser.add_argument("--record", default=None, help="MP4 file for headless runs")
    return parser


def parse_config(argv: Optional[Sequence[str]] = None) -> HostConfig:
    """Parse command-line arguments; invalid settings exit with a usage error."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return HostConfig(**vars(args))
    except ValueError as e:
        parser.error(str(e))


def run_headless(config: HostConfig, logger: RunLogger) -> int:
    """Run a fixed number of frames through the batched scan."""
    state = load_rom(create_state(jax.random.PRNGKey(config.seed)), read_cartridge(config.rom_path))
    ipf = config.instructions_per_frame
    chunk = int(config.timer_frequency)

    displays = []
    executed = 0
    with frame_progress(config.frames) as progress:
        remaining = config.frames
        while remaining > 0:
            count = min(chunk, remaining)
            state, chunk_displays = run_frames(state, count, ipf)
            displays.append(np.asarray(chunk_displays))
            executed += count * ipf
            remaining -= count
            progress.update(count)
            if int(state.error):
                break

    logger.log_run_end(executed)
    logger.log_registers(state.V, int(state.pc), int(state.I))

    if config.record:
        written = create_video(np.concatenate(displays), config.record,
                               fps=config.timer_frequency, scale=config.render_scale,
                               color_scheme=config.color_scheme)
        logger.info(f"Video saved: {config.record} ({written} frames)")

    if int(state.error):
        # The scan halts on error; replay the faulting step for a precise message
        machine = Machine()
        machine.state = state.replace(error=jnp.zeros_like(state.error))
        try:
            machine.step()
        except MachineError as e:
            logger.error(str(e))
        return 1
    return 0


def run_window(config: HostConfig, logger: RunLogger) -> int:
    """Interactive loop: steps and timer ticks are paced from elapsed wall time."""
    rom = read_cartridge(config.rom_path)
    machine = Machine(seed=config.seed)
    machine.load(rom)

    on_color, off_color = create_color_scheme(config.color_scheme)
    scale = config.render_scale

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption(f"chip8vm - {config.rom_path}")
    clock = pygame.time.Clock()

    step_period = 1.0 / config.instruction_frequency
    tick_period = 1.0 / config.timer_frequency
    step_budget = 0.0
    tick_budget = 0.0
    executed = 0
    paused = False
    running = True
    last_time = time.perf_counter()

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                    logger.info("Paused" if paused else "Resumed")
                elif event.key == pygame.K_F5:
                    machine = Machine(seed=config.seed)
                    machine.load(rom)
                    paused = False
                    logger.info("Reset")
                elif event.key in KEY_MAP:
                    machine.set_key_state(KEY_MAP[event.key], True)
            elif event.type == pygame.KEYUP and event.key in KEY_MAP:
                machine.set_key_state(KEY_MAP[event.key], False)

        now = time.perf_counter()
        elapsed = now - last_time
        last_time = now

        if not paused:
            step_budget += elapsed
            tick_budget += elapsed
            try:
                while step_budget >= step_period:
                    machine.step()
                    executed += 1
                    step_budget -= step_period
            except MachineError as e:
                logger.error(str(e))
                logger.log_registers(machine.V, machine.pc, machine.I)
                paused = True
                step_budget = 0.0
            while tick_budget >= tick_period:
                machine.tick_timers()
                tick_budget -= tick_period

        if machine.consume_redraw_flag():
            frame = framebuffer_to_rgb(machine.get_framebuffer(), scale, on_color, off_color)
            # pygame surfaces are indexed [x, y]
            pygame.surfarray.blit_array(screen, frame.swapaxes(0, 1))
            pygame.display.flip()

        clock.tick(config.timer_frequency)

    pygame.quit()
    logger.log_run_end(executed)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = parse_config(argv)
    logger = RunLogger(log_level=config.log_level)
    logger.log_run_start(config.rom_path, {
        "instruction_frequency": config.instruction_frequency,
        "instructions_per_frame": config.instructions_per_frame,
        "headless": config.headless,
        "seed": config.seed,
    })
    try:
        if config.headless:
            return run_headless(config, logger)
        return run_window(config, logger)
    except (MachineError, OSError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
