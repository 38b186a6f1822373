# tests/arch/avr8/test_avr8_cpu.py
"""
avr8_tracer.arch.avr8.cpuモジュールの単体テスト。
状態機械の遷移、スナップショット、割り込み受理、ウォッチドッグリセットを検証します。
"""
import pytest

from avr8_tracer.core.state import CpuPhase
from avr8_tracer.memory.data_memory import EXTENDED_OFFSET, MemoryAccessType
from avr8_tracer.memory.program_memory import encode_instruction
from avr8_tracer.arch.avr8 import io_map
from avr8_tracer.arch.avr8.cpu import Avr8Cpu
from avr8_tracer.arch.avr8.opcodes import Opcode
from avr8_tracer.arch.avr8.interrupts import PCICR_ADDRESS, PCIFR_ADDRESS

def _program(*instructions):
    return [encode_instruction(*instruction) for instruction in instructions]

# @intent:test_suite Avr8Cpuの命令サイクルと診断インターフェースの検証。

class TestAvr8CpuStateMachine:
    # @intent:test_case_transitions run_next_stateが FETCH -> DECODE -> EXECUTE -> FETCH と1遷移ずつ進むことを検証します。
    def test_run_next_state_transitions(self):
        cpu = Avr8Cpu(_program((Opcode.LDI, 16, 0x2A)))
        state = cpu.get_state()

        cpu.run_next_state()
        assert cpu.phase == CpuPhase.DECODE
        assert state.ir == encode_instruction(Opcode.LDI, 16, 0x2A)
        assert state.mar == 0
        assert state.pc == 1
        assert state.registers[16] == 0

        cpu.run_next_state()
        assert cpu.phase == CpuPhase.EXECUTE
        assert state.decoded.kind == Opcode.LDI
        assert state.registers[16] == 0

        cpu.run_next_state()
        assert cpu.phase == CpuPhase.FETCH
        assert state.registers[16] == 0x2A
        assert cpu.cycle_count == 3

    # @intent:test_case_step stepは1命令を完了させ、サイクル数が3ずつ増えることを検証します。
    def test_step_executes_one_instruction(self):
        cpu = Avr8Cpu(_program((Opcode.LDI, 16, 5), (Opcode.LDI, 17, 3)))
        snapshot = cpu.step()
        assert snapshot.operation.mnemonic == "LDI"
        assert snapshot.state.registers[16] == 5
        assert snapshot.state.pc == 1
        assert snapshot.metadata.cycle_count == 3
        assert cpu.step().metadata.cycle_count == 6

    # @intent:test_case_mid_instruction 命令の途中から呼ばれたstepは、その命令を完了させることを検証します。
    def test_step_from_mid_instruction_completes_it(self):
        cpu = Avr8Cpu(_program((Opcode.LDI, 16, 5), (Opcode.LDI, 17, 3)))
        cpu.run_next_state()
        snapshot = cpu.step()
        assert snapshot.state.registers[16] == 5
        assert snapshot.state.registers[17] == 0
        assert cpu.phase == CpuPhase.FETCH

    # @intent:test_case_pc_wrap PCは8bitで折り返すことを検証します。
    def test_pc_wraps_at_256(self):
        cpu = Avr8Cpu()
        cpu.get_state().pc = 0xFF
        cpu.step()
        assert cpu.get_state().pc == 0x00

    # @intent:test_case_snapshot_immutable スナップショットの状態は後続の実行で変化しないことを検証します。
    def test_snapshot_state_is_a_copy(self):
        cpu = Avr8Cpu(_program((Opcode.LDI, 16, 1), (Opcode.INC, 16)))
        first = cpu.step()
        cpu.step()
        assert first.state.registers[16] == 1
        assert cpu.get_state().registers[16] == 2

    def test_snapshot_records_memory_activity(self):
        cpu = Avr8Cpu(_program((Opcode.LDI, 16, 0x21), (Opcode.OUT, io_map.PORTB, 16)))
        assert cpu.step().bus_activity == []
        snapshot = cpu.step()
        assert [(a.address, a.data) for a in snapshot.writes()] == [(io_map.PORTB, 0x21)]
        assert snapshot.bus_activity[0].access_type == MemoryAccessType.WRITE

class TestAvr8CpuReset:
    # @intent:test_case_watchdog 未定義オペコードは全状態をリセットし、プログラムは保持されることを検証します。
    def test_unknown_opcode_resets(self, caplog):
        program = _program((Opcode.LDI, 16, 5), (Opcode.PUSH, 16), (Opcode.STS, 0x20, 16), (0x3F, 0, 0))
        cpu = Avr8Cpu(program)
        for _ in range(3):
            cpu.step()
        assert cpu.data_memory.peek(0x20 + 256) == 5

        with caplog.at_level("WARNING", logger="avr8_tracer.arch.avr8.cpu"):
            snapshot = cpu.step()
        assert "Unknown opcode" in caplog.text
        assert snapshot.operation.mnemonic == "UNKNOWN"

        state = cpu.get_state()
        assert state.pc == 0
        assert state.registers.as_list() == [0] * 32
        assert cpu.data_memory.peek(0x20 + 256) == 0
        assert cpu.stack.is_empty
        assert cpu.program_memory.read(0) == program[0]

        # リセット後は先頭から再実行される
        assert cpu.step().state.registers[16] == 5

    # @intent:test_case_invalid_phase 想定外のフェーズはリセットで回復することを検証します。
    def test_invalid_phase_resets(self):
        cpu = Avr8Cpu(_program((Opcode.LDI, 16, 5)))
        cpu.step()
        cpu.get_state().phase = None
        cpu.run_next_state()
        assert cpu.get_state().registers[16] == 0
        assert cpu.phase == CpuPhase.FETCH

    # @intent:test_case_idempotent resetを2回呼んでも1回と同じ状態になることを検証します。
    def test_reset_is_idempotent(self):
        cpu = Avr8Cpu(_program((Opcode.LDI, 16, 5), (Opcode.PUSH, 16), (Opcode.SEI,)))
        for _ in range(3):
            cpu.step()
        cpu.reset()
        once = (cpu.get_register_map(), cpu.get_flag_state(), cpu.cycle_count)
        cpu.reset()
        assert (cpu.get_register_map(), cpu.get_flag_state(), cpu.cycle_count) == once
        assert once[0]["PC"] == 0
        assert once[0]["SP"] == cpu.stack.capacity - 1
        assert once[2] == 0
        assert cpu.program_memory.size == 3

    def test_oversize_program_is_rejected(self):
        with pytest.raises(ValueError):
            Avr8Cpu([0] * 257)

class TestAvr8CpuInterrupts:
    def _armed_cpu(self):
        # PCINT1 を許可し、PINC bit0 を監視する
        program = _program((Opcode.JMP, 8)) + [0] * 7 + _program(
            (Opcode.LDI, 16, 1 << io_map.PCIE1),
            (Opcode.STS, io_map.PCICR, 16),
            (Opcode.LDI, 17, 0x01),
            (Opcode.STS, io_map.PCMSK1, 17),
            (Opcode.SEI,),
        ) + [0] * 8
        cpu = Avr8Cpu(program)
        for _ in range(6):
            cpu.step()
        assert cpu.get_state().pc == 13
        return cpu

    # @intent:test_case_service 許可された要因の変化でPCがベクタへ移り、Iフラグがクリアされることを検証します。
    def test_pin_change_redirects_to_vector(self):
        cpu = self._armed_cpu()
        assert cpu.data_memory.peek(PCICR_ADDRESS) == 0x02
        cpu.set_pin_input(io_map.PINC, 0x01)
        snapshot = cpu.step()

        assert snapshot.metadata.interrupt_vector == io_map.PCINT1_VECT
        assert snapshot.state.pc == io_map.PCINT1_VECT
        assert not snapshot.state.sr.i
        assert cpu.stack.last_added_value == 14
        assert cpu.data_memory.peek(PCIFR_ADDRESS) == 0x00

    # @intent:test_case_nested_blocked Iフラグのクリア中は次の変化がラッチされるのみで受理されないことを検証します。
    def test_nested_interrupt_is_latched(self):
        cpu = self._armed_cpu()
        cpu.set_pin_input(io_map.PINC, 0x01)
        cpu.step()
        cpu.set_pin_input(io_map.PINC, 0x00)
        snapshot = cpu.step()
        assert snapshot.metadata.interrupt_vector is None
        assert cpu.data_memory.peek(PCIFR_ADDRESS) == 0x02

    def test_unmasked_pin_is_ignored(self):
        cpu = self._armed_cpu()
        cpu.set_pin_input(io_map.PINC, 0x02)
        snapshot = cpu.step()
        assert snapshot.metadata.interrupt_vector is None
        assert cpu.data_memory.peek(PCIFR_ADDRESS) == 0x00

    def test_pin_input_is_not_logged(self):
        cpu = Avr8Cpu()
        assert cpu.set_pin_input(io_map.PINB, 0x20)
        assert cpu.data_memory.get_and_clear_activity_log() == []
        assert not cpu.set_pin_input(5000, 0x01)

    # @intent:test_case_latch_not_logged ピン変化をラッチしたNOPのスナップショットにメモリアクセスが現れないことを検証します。
    def test_latched_pin_change_leaves_nop_activity_empty(self):
        cpu = Avr8Cpu()
        cpu.data_memory.poke(io_map.PCMSK0 + EXTENDED_OFFSET, 0xFF)
        cpu.set_pin_input(io_map.PINB, 0x01)
        snapshot = cpu.step()
        assert snapshot.operation.mnemonic == "NOP"
        assert cpu.data_memory.peek(PCIFR_ADDRESS) == 0x01
        assert snapshot.bus_activity == []

class TestAvr8CpuDiagnostics:
    def test_register_map_and_flags(self):
        cpu = Avr8Cpu(_program((Opcode.LDI, 30, 7), (Opcode.SEI,)))
        cpu.step()
        cpu.step()
        registers = cpu.get_register_map()
        assert registers["R30"] == 7
        assert registers["PC"] == 2
        assert registers["MAR"] == 1
        assert registers["SR"] == 0x20
        assert set(cpu.get_flag_state()) == {"I", "S", "N", "Z", "V", "C"}
        assert cpu.get_flag_state()["I"]

    # @intent:test_case_symbol_info シンボル情報にラベル（なければ領域名）が付与されることを検証します。
    def test_symbol_info_uses_labels_and_regions(self):
        program = _program((Opcode.JMP, 2), (Opcode.NOP,), (Opcode.LDI, 16, 1), (Opcode.JMP, 2))
        cpu = Avr8Cpu(program, regions=[(0, "RESET_vect"), (2, "main")])
        assert cpu.step().metadata.symbol_info == "RESET_vect: JMP $02"
        cpu.set_symbol_map({"start": 2})
        assert cpu.step().metadata.symbol_info == "start: LDI R16, #$01"
        assert cpu.step().metadata.symbol_info == "main: JMP $02"
        assert cpu.current_subroutine() == "main"

    def test_disassemble(self):
        cpu = Avr8Cpu(_program((Opcode.LDI, 16, 5), (Opcode.RET,)))
        assert cpu.disassemble(0, 2) == [
            (0, "011005", "LDI R16, #$05"),
            (1, "1E0000", "RET"),
        ]
