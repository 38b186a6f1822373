# avr8_tracer/debugger/debugger.py
"""
デバッガモジュール。

コアエンジンの実行を制御し、ユーザーが指定した条件（ブレークポイント）で
実行を中断させる責務を負います。
エンジンは停止命令を持たないため、連続実行は常に命令数の上限付きで行います。
"""
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, List, Optional
import time

from avr8_tracer.core.cpu import AbstractCpu
from avr8_tracer.core.snapshot import Snapshot
from avr8_tracer.memory.data_memory import MemoryAccessType

DEFAULT_MAX_INSTRUCTIONS = 100_000

# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # プログラムカウンタが特定のアドレスに一致
    MEMORY_READ = "MEMORY_READ"         # 特定のアドレスが読み込まれた
    MEMORY_WRITE = "MEMORY_WRITE"       # 特定のアドレスに書き込まれた
    REGISTER_VALUE = "REGISTER_VALUE"   # 特定のレジスタが特定の値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 特定のレジスタの値が変化した
    INTERRUPT = "INTERRUPT"             # 割り込みが受理された（valueでベクタを限定可能）

# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    ブレークポイントがヒットするための条件を定義するデータクラス。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUE, INTERRUPTで使用
    address: Optional[int] = None         # MEMORY_READ, MEMORY_WRITEで使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用 ("R16", "PC", "SR" など)
    enabled: bool = True

# @intent:responsibility コアエンジンの実行制御とブレークポイント管理を行います。
class Debugger:
    """
    CPUの実行を制御し、ブレークポイントの管理を行うクラス。
    """
    def __init__(self, cpu: AbstractCpu, history_limit: Optional[int] = None):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._previous_registers: Dict[str, int] = cpu.get_register_map()
        self._last_snapshot: Optional[Snapshot] = None
        # @intent:responsibility 実行履歴を保持します。history_limitを指定すると古いものから破棄されます。
        self._history: Deque[Snapshot] = deque(maxlen=history_limit)

    @property
    def is_running(self) -> bool:
        return self._running

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        if old_condition in self._breakpoints:
            idx = self._breakpoints.index(old_condition)
            self._breakpoints[idx] = new_condition

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def _is_pc_breakpoint(self, pc: int) -> bool:
        return any(
            bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
            for bp in self._breakpoints
        )

    # @intent:responsibility Snapshotとレジスタの差分に基づいてPC_MATCH以外のブレークポイントをチェックします。
    def _check_other_breakpoints(self, snapshot: Snapshot, registers: Dict[str, int]) -> bool:
        for bp in self._breakpoints:
            if not bp.enabled:
                continue

            if bp.condition_type == BreakpointConditionType.MEMORY_READ:
                for access in snapshot.bus_activity:
                    if access.access_type == MemoryAccessType.READ and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.MEMORY_WRITE:
                for access in snapshot.bus_activity:
                    if access.access_type == MemoryAccessType.WRITE and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE:
                if bp.register_name and registers.get(bp.register_name.upper()) == bp.value:
                    return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                if bp.register_name:
                    name = bp.register_name.upper()
                    if name in registers and registers[name] != self._previous_registers.get(name):
                        return True
            elif bp.condition_type == BreakpointConditionType.INTERRUPT:
                vector = snapshot.metadata.interrupt_vector
                if vector is not None and (bp.value is None or bp.value == vector):
                    return True
        return False

    def step_instruction(self) -> Snapshot:
        """
        CPUを1命令分実行し、その結果のSnapshotを返します。
        """
        self._previous_registers = self._cpu.get_register_map()
        snapshot = self._cpu.step()
        self._last_snapshot = snapshot
        self._history.append(snapshot)
        return snapshot

    # @intent:responsibility ブレークポイントに到達するか、停止要求か、命令数の上限に達するまで実行を継続します。
    # @intent:post-condition 実行した命令数を返します。
    def run(self, max_instructions: int = DEFAULT_MAX_INSTRUCTIONS) -> int:
        self._running = True
        executed = 0

        # 現在のPCにブレークポイントがある場合は、まず1命令進めてから判定する
        if max_instructions > 0 and self._is_pc_breakpoint(self._cpu.get_state().pc):
            executed += self._step_and_check()

        while self._running and executed < max_instructions:
            time.sleep(0)

            current_pc = self._cpu.get_state().pc
            if self._is_pc_breakpoint(current_pc):
                self._running = False
                print(f"Breakpoint hit at PC: {current_pc:#04x}")
                break

            executed += self._step_and_check()

        self._running = False
        return executed

    def _step_and_check(self) -> int:
        snapshot = self.step_instruction()
        registers = self._cpu.get_register_map()
        if self._check_other_breakpoints(snapshot, registers):
            self._running = False
            print(f"Breakpoint hit at PC: {snapshot.state.pc:#04x}")
        return 1

    def stop(self) -> None:
        self._running = False
