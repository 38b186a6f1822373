# src/avr8_tracer/arch/avr8/instructions/base.py
"""
AVR8命令実装用の共通ユーティリティ。
"""
import logging

from avr8_tracer.memory.data_memory import EXTENDED_OFFSET
from avr8_tracer.memory.stack import Stack
from avr8_tracer.arch.avr8.io_map import REGISTER_ALIASES
from avr8_tracer.arch.avr8.state import Avr8CpuState

logger = logging.getLogger(__name__)

__all__ = ["EXTENDED_OFFSET", "read_pointer", "push_byte", "pop_byte", "format_operand"]

# @intent:utility_function オペランドで指定されたレジスタペアから16bitアドレスを読み出します。
def read_pointer(state: Avr8CpuState, low_index: int) -> int:
    """R[n] | (R[n+1] << 8)"""
    return state.registers.pair(low_index)

# @intent:utility_function スタックに1バイト積みます。満杯の場合は警告を記録し、状態は変化しません。
def push_byte(stack: Stack, value: int) -> bool:
    if not stack.push(value):
        logger.warning("Stack overflow: push of $%02X ignored", value & 0xFF)
        return False
    return True

# @intent:utility_function スタックから1バイト取り出します。空の場合は警告を記録し、0を返します。
def pop_byte(stack: Stack) -> int:
    value, underflow = stack.pop()
    if underflow:
        logger.warning("Stack underflow: pop returned $00")
    return value

_REGISTER_NAMES = {index: name for name, index in REGISTER_ALIASES.items() if len(name) == 1}

# @intent:utility_function オペランドの種類に応じて表示用文字列を生成します。
def format_operand(kind: str, value: int) -> str:
    """
    kind: 'r' レジスタ, 'p' ポインタレジスタ, 'k' 定数, 'a' I/Oアドレス, 'l' プログラムアドレス
    """
    if kind == "r":
        return f"R{value}"
    if kind == "p":
        return _REGISTER_NAMES.get(value, f"R{value}")
    if kind in ("a", "l"):
        return f"${value:02X}"
    return f"#${value:02X}"
