# src/avr8_tracer/arch/avr8/opcodes.py
"""
AVR8 命令セットのオペコード定義と、デコード済み命令の型。
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from avr8_tracer.core.snapshot import Operation

# @intent:responsibility 命令の種類を表す閉じたタグ付き列挙型です。値は1バイトのオペコードと一致します。
class Opcode(IntEnum):
    NOP = 0x00
    LDI = 0x01
    MOV = 0x02
    OUT = 0x03
    IN = 0x04
    STS = 0x05
    LDS = 0x06
    CLR = 0x07
    ORI = 0x08
    ANDI = 0x09
    XORI = 0x0A
    OR = 0x0B
    AND = 0x0C
    XOR = 0x0D
    ADDI = 0x0E
    SUBI = 0x0F
    ADD = 0x10
    SUB = 0x11
    INC = 0x12
    DEC = 0x13
    CPI = 0x14
    CP = 0x15
    JMP = 0x16
    BREQ = 0x17
    BRNE = 0x18
    BRGE = 0x19
    BRGT = 0x1A
    BRLE = 0x1B
    BRLT = 0x1C
    CALL = 0x1D
    RET = 0x1E
    RETI = 0x1F
    PUSH = 0x20
    POP = 0x21
    LSL = 0x22
    LSR = 0x23
    SEI = 0x24
    CLI = 0x25
    STIO = 0x26
    LDIO = 0x27
    ST = 0x28
    LD = 0x29

    @classmethod
    def lookup(cls, value: int) -> Optional["Opcode"]:
        """未定義のオペコードにはNoneを返します。"""
        try:
            return cls(value)
        except ValueError:
            return None

# @intent:responsibility デコード済みのAVR8命令 {kind, operand1, operand2} を表します。
# @intent:rationale kindがNoneの場合は未定義オペコードであり、実行フェーズで明示的に検査されます。
@dataclass(frozen=True)
class Avr8Operation(Operation):
    kind: Optional[Opcode] = None

    @property
    def operand1(self) -> int:
        return self.operand_bytes[0] if self.operand_bytes else 0

    @property
    def operand2(self) -> int:
        return self.operand_bytes[1] if len(self.operand_bytes) > 1 else 0
