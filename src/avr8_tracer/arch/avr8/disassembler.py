# src/avr8_tracer/arch/avr8/disassembler.py
"""
AVR8 Disassembler

プログラムメモリ上の命令ワードを解析し、アセンブリ言語（ニーモニック）に変換します。
Instruction Layerのデコードロジックを再利用します。
"""
from typing import List, Tuple

from avr8_tracer.memory.program_memory import ProgramMemory
from avr8_tracer.arch.avr8.instructions import decode_instruction

# @intent:responsibility 指定されたプログラムメモリ範囲を逆アセンブルし、表示用データを生成します。
def disassemble(program_memory: ProgramMemory, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    Returns:
        List of (address, hex_word, mnemonic) tuples.
    """
    result = []
    end_addr = min(start_addr + length, program_memory.capacity)

    for address in range(max(start_addr, 0), end_addr):
        word = program_memory.read(address)
        operation = decode_instruction(word)

        mnemonic_str = operation.mnemonic
        if operation.operands:
            mnemonic_str += " " + ", ".join(operation.operands)

        result.append((address, f"{word:06X}", mnemonic_str))

    return result
