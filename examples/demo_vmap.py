"""Run many independently seeded machines on one ROM with jax.vmap."""

import sys
import time

import jax

from chip8vm import create_state, load_rom, read_cartridge, run_frames


if __name__ == "__main__":
    rom = read_cartridge(sys.argv[1])
    num_machines = int(sys.argv[2]) if len(sys.argv) > 2 else 256

    def rollout(rng):
        state = load_rom(create_state(rng), rom)
        final_state, displays = run_frames(state, 60, 12)
        return final_state

    rngs = jax.random.split(jax.random.PRNGKey(0), num_machines)
    batched = jax.jit(jax.vmap(rollout))

    start_compile = time.perf_counter()
    compiled = batched.lower(rngs).compile()
    print("Compilation time (s):", time.perf_counter() - start_compile)

    start_exec = time.perf_counter()
    final_states = jax.block_until_ready(compiled(rngs))
    elapsed = time.perf_counter() - start_exec
    print("Execution time (s):", elapsed)
    print(f"Instructions/s: {num_machines * 60 * 12 / elapsed:,.0f}")
    print("Machines halted on error:", int((final_states.error != 0).sum()))
