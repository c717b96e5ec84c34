"""Tests for the host-facing Machine."""

import numpy as np
import pytest
from chip8vm import (
    Machine, StepResult, RomTooLarge, OutOfBounds, UnknownOpcode, StackOverflow, StackUnderflow,
    MAX_ROM_SIZE, PROGRAM_START,
)
from chip8vm.constants import FONT_DATA
from conftest import assemble, program_machine


def at(address, *words):
    """ROM image placing ``words`` at ``address``, zero-padded from 0x200."""
    return bytes(address - PROGRAM_START) + assemble(*words)


class TestLoad:
    def test_rom_copied_to_program_start(self, machine):
        rom = bytes(range(256)) * 3
        machine.load(rom)

        memory = np.asarray(machine.state.memory)
        assert bytes(memory[PROGRAM_START:PROGRAM_START + len(rom)]) == rom
        assert bytes(memory[:len(FONT_DATA)]) == bytes(FONT_DATA)
        assert machine.pc == PROGRAM_START

    def test_largest_rom_fits(self, machine):
        machine.load(b"\xAB" * MAX_ROM_SIZE)
        assert int(machine.state.memory[0xFFF]) == 0xAB

    def test_rom_too_large(self, machine):
        with pytest.raises(RomTooLarge):
            machine.load(b"\x12" * (MAX_ROM_SIZE + 1))

        # machine stays usable and untouched
        assert int(machine.state.memory[PROGRAM_START]) == 0
        machine.load(assemble(0x1200))
        assert machine.step() == StepResult.EXECUTED


class TestStep:
    def test_sequential_instructions_advance_by_two(self):
        machine = program_machine(0x6001, 0x6102, 0x8014)
        for expected_pc in (0x202, 0x204, 0x206):
            assert machine.step() == StepResult.EXECUTED
            assert machine.pc == expected_pc
        assert machine.V[0] == 3

    def test_jump_sets_pc_exactly(self):
        machine = program_machine(0x1250)
        machine.step()
        assert machine.pc == 0x250

    def test_call_then_return_resumes_after_call(self):
        rom = bytearray(at(0x300, 0x00EE))
        rom[0:2] = assemble(0x2300)
        machine = Machine()
        machine.load(bytes(rom))

        machine.step()
        assert machine.pc == 0x300
        machine.step()
        assert machine.pc == 0x202

    def test_skip_taken_and_not_taken(self):
        machine = program_machine(0x6005, 0x3005, 0x0000, 0x3006, 0x6001)
        machine.step()
        machine.step()
        assert machine.pc == 0x206  # skipped the 0000 word
        machine.step()
        assert machine.pc == 0x208  # not skipped

    def test_clear_screen_marks_redraw(self):
        machine = program_machine(0xA000, 0xD015, 0x00E0)
        machine.step()
        machine.step()
        assert machine.consume_redraw_flag()
        assert machine.get_framebuffer().sum() > 0

        machine.step()
        assert machine.get_framebuffer().sum() == 0
        assert machine.consume_redraw_flag()
        assert not machine.consume_redraw_flag()
        assert machine.pc == 0x206

    def test_draw_through_machine(self):
        machine = program_machine(0x600A, 0x6105, 0xA208, 0xD011, 0xFF00)
        for _ in range(4):
            machine.step()

        framebuffer = machine.get_framebuffer()
        assert framebuffer.shape == (64, 32)
        assert framebuffer[10:18, 5].tolist() == [1] * 8
        assert framebuffer.sum() == 8
        assert machine.V[15] == 0


class TestKeyWait:
    def test_waits_until_key_pressed(self):
        machine = program_machine(0xF50A)

        for _ in range(3):
            assert machine.step() == StepResult.AWAITING_KEY
            assert machine.pc == 0x200
            assert machine.V[5] == 0
            assert machine.awaiting_key

        machine.set_key_state(7, True)
        assert machine.step() == StepResult.EXECUTED
        assert machine.pc == 0x202
        assert machine.V[5] == 7
        assert not machine.awaiting_key

    def test_timers_run_while_waiting(self):
        machine = program_machine(0x6003, 0xF015, 0xF00A)
        for _ in range(3):
            machine.step()
        machine.tick_timers()
        assert machine.delay_timer == 2

    def test_skip_on_key(self):
        machine = program_machine(0x6004, 0xE09E, 0x0000, 0x1206)
        machine.set_key_state(4, True)
        machine.step()
        machine.step()
        assert machine.pc == 0x206

        machine.set_key_state(4, False)
        assert not bool(machine.state.keypad[4])

    @pytest.mark.parametrize("code", [-1, 16])
    def test_invalid_key_code(self, machine, code):
        with pytest.raises(ValueError):
            machine.set_key_state(code, True)


class TestTimers:
    def test_step_does_not_touch_timers(self):
        machine = program_machine(0x6005, 0xF015, 0xF018, 0x1206)
        for _ in range(6):
            machine.step()
        assert machine.delay_timer == 5
        assert machine.sound_timer == 5
        assert machine.sound_active

        for _ in range(10):
            machine.tick_timers()
        assert machine.delay_timer == 0
        assert machine.sound_timer == 0
        assert not machine.sound_active


class TestErrors:
    def test_stack_overflow_on_17th_call(self):
        machine = program_machine(0x2200)  # calls itself forever
        for _ in range(16):
            machine.step()

        with pytest.raises(StackOverflow):
            machine.step()
        assert machine.pc == 0x200
        assert int(machine.state.stack.pointer) == 16

    def test_stack_underflow(self):
        machine = program_machine(0x00EE)
        with pytest.raises(StackUnderflow):
            machine.step()
        assert machine.pc == 0x200
        assert int(machine.state.stack.pointer) == 0

    def test_unknown_opcode_is_surfaced(self):
        machine = program_machine(0x6001, 0x5121)
        machine.step()
        with pytest.raises(UnknownOpcode) as excinfo:
            machine.step()
        assert excinfo.value.opcode == 0x5121
        assert excinfo.value.pc == 0x202
        assert machine.pc == 0x202
        assert machine.V[0] == 1

    def test_empty_memory_is_unknown(self, machine):
        with pytest.raises(UnknownOpcode):
            machine.step()

    def test_fetch_past_memory_end(self):
        machine = program_machine(0x1FFF)
        machine.step()
        with pytest.raises(OutOfBounds):
            machine.step()
        assert machine.pc == 0xFFF

    def test_errors_repeat_until_host_intervenes(self):
        machine = program_machine(0x00EE)
        for _ in range(2):
            with pytest.raises(StackUnderflow):
                machine.step()


class TestFramebuffer:
    def test_framebuffer_is_read_only(self, machine):
        framebuffer = machine.get_framebuffer()
        assert framebuffer.dtype == np.uint8
        with pytest.raises(ValueError):
            framebuffer[0, 0] = 1

    def test_redraw_flag_starts_clear(self, machine):
        assert not machine.consume_redraw_flag()
