"""
AVR8 ALU (算術論理演算ユニット)。

OR / AND / XOR / ADD / SUB を計算し、ステータスフラグ (S, N, Z, V, C) を更新します。
Iフラグは変更しません。

S (Signed) は N xor V で、符号付きオーバーフローを考慮した「結果が負か」を表します。
例えば -100 - 50 は8bitでは 106 (0110 0110) となり N=0 ですが、V=1 のため S=1 となり、
正しく負として解釈されます。
"""
from enum import Enum

from avr8_tracer.arch.avr8.state import StatusRegister

# @intent:responsibility ALUが実行できる演算の種類を定義します。
class AluOperation(Enum):
    OR = "OR"
    AND = "AND"
    XOR = "XOR"
    ADD = "ADD"
    SUB = "SUB"

def _bit(value: int, bit: int) -> bool:
    return (value >> bit) & 1 == 1

# @intent:responsibility 演算を実行して8bitの結果を返し、副作用としてフラグを更新します。
# @intent:post-condition S == N xor V。Sは確定したN, Vから最後に計算されます。
def alu(operation: AluOperation, a: int, b: int, sr: StatusRegister) -> int:
    """
    8bitオペランドa, bに対して演算を行い、結果の下位8bitを返します。
    SUBは a + (bの2の補数) として計算され、Cは拡張結果のbit 8となります（a >= b のときC=1）。
    """
    a &= 0xFF
    b &= 0xFF
    sr.clear_arithmetic()
    result = 0
    overflow = False

    if operation == AluOperation.OR:
        result = a | b
    elif operation == AluOperation.AND:
        result = a & b
    elif operation == AluOperation.XOR:
        result = a ^ b
    elif operation == AluOperation.ADD:
        result = a + b
        # 同符号の加算で結果の符号が変わった場合
        overflow = _bit(a, 7) == _bit(b, 7) and _bit(result, 7) != _bit(a, 7)
    elif operation == AluOperation.SUB:
        negated = 0x100 - b
        result = a + negated
        # a + (-b) として、同符号の加算で結果の符号が変わった場合
        overflow = _bit(a, 7) == _bit(negated, 7) and _bit(result, 7) != _bit(a, 7)

    sr.v = overflow
    sr.c = _bit(result, 8)
    sr.n = _bit(result, 7)
    sr.z = (result & 0xFF) == 0
    sr.s = sr.n != sr.v

    return result & 0xFF
