# src/avr8_tracer/arch/avr8/cpu.py
"""
AVR8 制御ユニット (Control Unit) の中心モジュール。

プログラムメモリからのフェッチ、デコード、実行を状態機械として駆動し、
ALU・スタック・データメモリへの操作を命令実装に委譲します。
各クロックサイクルの最後にピン変化割り込みの監視を行い、
EXECUTE完了後には保留中の割り込みを受理してPCをベクタへ切り替えます。

エンジンの境界を越えて例外は送出されません。未定義オペコードや不正な状態は
ウォッチドッグリセット相当として全状態を初期化します。
"""
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from avr8_tracer.core.cpu import AbstractCpu
from avr8_tracer.core.state import CpuPhase
from avr8_tracer.memory.data_memory import DataMemory, MemoryAccess
from avr8_tracer.memory.program_memory import ProgramMemory
from avr8_tracer.memory.stack import Stack
from avr8_tracer.arch.avr8.opcodes import Avr8Operation
from avr8_tracer.arch.avr8.state import Avr8CpuState
from avr8_tracer.arch.avr8.interrupts import PinChangeInterruptController, PinChangeSource
from avr8_tracer.arch.avr8.instructions import decode_instruction, execute_instruction
from avr8_tracer.arch.avr8.instructions.base import push_byte
from avr8_tracer.arch.avr8 import disassembler

logger = logging.getLogger(__name__)

# @intent:responsibility AVR8 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行、割り込み）を提供します。
class Avr8Cpu(AbstractCpu):
    """
    AVR8 CPUをエミュレートするクラス。
    全ての可変状態（レジスタ、ステータス、メモリ、スタック、PC）はこのインスタンスが排他的に所有します。
    """
    # @intent:responsibility Avr8Cpuを初期化し、ファームウェアをプログラムメモリにロードします。
    # @intent:pre-condition programは256命令以下である必要があります（超過時はValueError）。
    def __init__(self, program: Sequence[int] = (),
                 regions: Optional[Iterable[Tuple[int, str]]] = None):
        self._firmware: List[int] = list(program)
        self._regions: List[Tuple[int, str]] = list(regions or [])
        self._program_memory = ProgramMemory()
        self._data_memory = DataMemory()
        self._stack = Stack()
        self._interrupts = PinChangeInterruptController(self._data_memory)
        super().__init__()
        self.reset()

    @property
    def program_memory(self) -> ProgramMemory:
        return self._program_memory

    @property
    def data_memory(self) -> DataMemory:
        return self._data_memory

    @property
    def stack(self) -> Stack:
        return self._stack

    @property
    def interrupts(self) -> PinChangeInterruptController:
        return self._interrupts

    # @intent:responsibility AVR8の初期状態を生成します。
    def _create_initial_state(self) -> Avr8CpuState:
        return Avr8CpuState()

    def get_state(self) -> Avr8CpuState:
        return self._state

    # @intent:responsibility レジスタ、メモリ、スタック、割り込みラッチを初期化し、ファームウェアを再ロードします。
    # @intent:rationale プログラムメモリは書き込み一回限りのため、2回目以降のロードは何もしません。resetは冪等です。
    def reset(self) -> None:
        super().reset()
        self._data_memory.reset()
        self._stack.reset()
        self._interrupts.reset()
        self._program_memory.write(self._firmware, self._regions)

    # @intent:responsibility FETCH: PCの命令をIRに読み込み、アドレスをMARに記録してPCを進めます。
    def _fetch(self) -> None:
        state = self._state
        state.ir = self._program_memory.read(state.pc)
        state.decoded = None
        state.mar = state.pc
        state.pc = (state.pc + 1) & 0xFF

    # @intent:responsibility DECODE: IRを型付きのAvr8Operationに分解し、EXECUTEへ受け渡します。
    def _decode(self) -> None:
        self._state.decoded = decode_instruction(self._state.ir)

    # @intent:responsibility EXECUTE: デコード済み命令を実行します。未定義命令はリセットで回復します。
    def _execute(self) -> None:
        operation = self._current_operation()
        if not execute_instruction(operation, self._state, self._data_memory, self._stack):
            logger.warning("Unknown opcode $%s at address %d, resetting",
                           operation.opcode_hex, self._state.mar)
            self.reset()

    def _current_operation(self) -> Avr8Operation:
        if self._state.decoded is None:
            self._state.decoded = decode_instruction(self._state.ir)
        return self._state.decoded

    def _current_address(self) -> int:
        return self._state.mar

    # @intent:responsibility 保留中の割り込みを優先順位に従って1つだけ受理します。
    def _check_for_interrupt(self) -> None:
        source = self._interrupts.check_for_irq(self._state.sr)
        if source is not None:
            self._generate_interrupt(source)

    # @intent:responsibility 割り込みを発生させます: 戻りアドレスをプッシュし、Iフラグをクリアしてベクタへジャンプします。
    # @intent:rationale Iフラグのクリアにより、ネストした割り込みはRETIまで受理されません。
    def _generate_interrupt(self, source: PinChangeSource) -> None:
        push_byte(self._stack, self._state.pc)
        self._state.sr.i = False
        self._state.pc = source.vector
        self._last_interrupt_vector = source.vector
        logger.debug("%s serviced, jumping to vector $%02X", source.name, source.vector)

    # @intent:responsibility 各クロックサイクルの最後にピン変化割り込み要因を監視します。
    def _on_clock(self) -> None:
        self._interrupts.monitor()

    def _clear_activity_log(self) -> None:
        self._data_memory.get_and_clear_activity_log()

    def _drain_activity_log(self) -> List[MemoryAccess]:
        return self._data_memory.get_and_clear_activity_log()

    # @intent:responsibility スナップショットのシンボル情報として、ラベルがなければサブルーチン名を用います。
    def _describe_address(self, address: int) -> str:
        label = super()._describe_address(address)
        if label:
            return label
        return self._program_memory.subroutine_name(address)

    # @intent:responsibility 外部ドライバが入力ポート（PINx）などに値を注入するためのフックです。
    def set_pin_input(self, address: int, value: int) -> bool:
        return self._data_memory.poke(address, value)

    # @intent:responsibility 実行中の命令が属するサブルーチン名を返します（診断用）。
    def current_subroutine(self) -> str:
        return self._program_memory.subroutine_name(self._state.mar)

    @property
    def phase(self) -> CpuPhase:
        return self._state.phase

    # @intent:responsibility 現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        registers = {f"R{i}": value for i, value in enumerate(s.registers.as_list())}
        registers.update({
            "PC": s.pc, "SP": self._stack.pointer, "SR": s.sr.value, "MAR": s.mar, "IR": s.ir
        })
        return registers

    # @intent:responsibility 現在のフラグ状態を辞書形式で提供します。
    def get_flag_state(self) -> Dict[str, bool]:
        sr = self._state.sr
        return {
            "I": sr.i, "S": sr.s, "N": sr.n, "Z": sr.z, "V": sr.v, "C": sr.c
        }

    # @intent:responsibility 指定範囲のプログラムメモリを逆アセンブルします。
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self._program_memory, start_addr, length)
