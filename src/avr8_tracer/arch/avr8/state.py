# src/avr8_tracer/arch/avr8/state.py
"""
AVR8 CPU固有の状態定義。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from avr8_tracer.core.state import CpuState
from avr8_tracer.arch.avr8.io_map import REGISTER_COUNT
from avr8_tracer.arch.avr8.opcodes import Avr8Operation

# AVR8 ステータスレジスタ (SR) ビットマスク
# @intent:constant ステータスレジスタ内の各フラグビットの位置を定義します（下位から C, V, Z, N, S, I）。
C_FLAG = 0b00000001  # Carry
V_FLAG = 0b00000010  # Overflow
Z_FLAG = 0b00000100  # Zero
N_FLAG = 0b00001000  # Negative
S_FLAG = 0b00010000  # Signed (N xor V)
I_FLAG = 0b00100000  # Global Interrupt Enable

ARITHMETIC_FLAGS = S_FLAG | N_FLAG | Z_FLAG | V_FLAG | C_FLAG

# @intent:responsibility 1バイトのステータスレジスタを、名前付きのブール値アクセサで隠蔽します。
class StatusRegister:
    """
    ステータスレジスタ (ISNZVC)。
    変更するのはALUと SEI / CLI / RETI 命令、および割り込み受理のみです。
    """
    def __init__(self, value: int = 0x00):
        self._value = value & 0x3F

    # @intent:responsibility 6bitに詰めたフラグ値 (ISNZVC) を提供します。書き込みは下位6bitにマスクされます。
    @property
    def value(self) -> int:
        return self._value

    @value.setter
    def value(self, value: int) -> None:
        self._value = value & 0x3F

    def __repr__(self) -> str:
        return f"StatusRegister({self.value:06b})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatusRegister):
            return NotImplemented
        return self.value == other.value

    def _get(self, mask: int) -> bool:
        return (self.value & mask) != 0

    def _set(self, mask: int, flag: bool) -> None:
        if flag: self.value |= mask
        else: self.value &= ~mask

    # @intent:responsibility I以外の演算フラグ (S, N, Z, V, C) を全てクリアします。
    def clear_arithmetic(self) -> None:
        self.value &= ~ARITHMETIC_FLAGS

    @property
    def i(self) -> bool:
        return self._get(I_FLAG)

    @i.setter
    def i(self, flag: bool) -> None:
        self._set(I_FLAG, flag)

    @property
    def s(self) -> bool:
        return self._get(S_FLAG)

    @s.setter
    def s(self, flag: bool) -> None:
        self._set(S_FLAG, flag)

    @property
    def n(self) -> bool:
        return self._get(N_FLAG)

    @n.setter
    def n(self, flag: bool) -> None:
        self._set(N_FLAG, flag)

    @property
    def z(self) -> bool:
        return self._get(Z_FLAG)

    @z.setter
    def z(self, flag: bool) -> None:
        self._set(Z_FLAG, flag)

    @property
    def v(self) -> bool:
        return self._get(V_FLAG)

    @v.setter
    def v(self, flag: bool) -> None:
        self._set(V_FLAG, flag)

    @property
    def c(self) -> bool:
        return self._get(C_FLAG)

    @c.setter
    def c(self, flag: bool) -> None:
        self._set(C_FLAG, flag)

# @intent:responsibility 32本の8bit汎用レジスタを保持します。
# @intent:rationale 範囲外インデックスはデータメモリと同じく「読み込みは0、書き込みは無視」とし、例外を発生させません。
class RegisterFile:
    def __init__(self, size: int = REGISTER_COUNT):
        self._regs: List[int] = [0x00] * size

    def __len__(self) -> int:
        return len(self._regs)

    def __repr__(self) -> str:
        return f"RegisterFile({self._regs!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisterFile):
            return NotImplemented
        return self._regs == other._regs

    def __getitem__(self, index: int) -> int:
        if 0 <= index < len(self._regs):
            return self._regs[index]
        return 0x00

    def __setitem__(self, index: int, value: int) -> None:
        if 0 <= index < len(self._regs):
            self._regs[index] = value & 0xFF

    # @intent:responsibility 隣接する2本のレジスタを16bitポインタ（下位, 上位）として読み出します。
    def pair(self, low_index: int) -> int:
        return self[low_index] | (self[low_index + 1] << 8)

    def as_list(self) -> List[int]:
        return list(self._regs)

# @intent:responsibility AVR8 CPUの全ての状態（PC, MAR, IR, SR, R0-R31, フェーズ, デコード済み命令）を保持します。
@dataclass
class Avr8CpuState(CpuState):
    """
    AVR8 CPUの状態を保持するデータクラス。
    decoded はDECODEフェーズからEXECUTEフェーズへ受け渡される型付きの命令です。
    """
    mar: int = 0x00    # 実行中の命令のアドレス（診断用）
    ir: int = 0x000000 # Instruction Register
    sr: StatusRegister = field(default_factory=StatusRegister)
    registers: RegisterFile = field(default_factory=RegisterFile)
    decoded: Optional[Avr8Operation] = None
