# avr8_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令実行後のCPUとデータメモリアクセスの状態を記録した
不変のデータ構造を定義します。デバッガへの情報提供と、決定的なリプレイの比較に用います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from avr8_tracer.core.state import CpuState
from avr8_tracer.memory.data_memory import MemoryAccess, MemoryAccessType

# @intent:responsibility 実行された命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    実行された命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str # 例: "01"
    mnemonic: str # 例: "LDI"
    operands: List[str] = field(default_factory=list) # 例: ["R16", "$05"]
    operand_bytes: List[int] = field(default_factory=list) # 生のオペランドバイト

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（累計サイクル数、シンボル情報、受理した割り込みなど）を記録するデータクラス。
    """
    cycle_count: int
    symbol_info: Optional[str] = None # 例: "setup: LDI R16, $01"
    interrupt_vector: Optional[int] = None # この命令の直後に受理された割り込みのベクタ

# @intent:responsibility ある一時点におけるCPUとデータメモリアクセスの状態を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    ある一時点における、CPUの状態と直前の命令で発生したメモリアクセスを記録した不変のデータ構造。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[MemoryAccess] = field(default_factory=list)

    # @intent:rationale stateは生成時にディープコピーされるため、後続の実行で変化しません。

    def writes(self) -> List[MemoryAccess]:
        """この命令で発生した書き込みアクセスのみを返します。"""
        return [a for a in self.bus_activity if a.access_type == MemoryAccessType.WRITE]
