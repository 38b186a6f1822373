"""
AVR8命令セット実装パッケージ。
"""
from avr8_tracer.memory.data_memory import DataMemory
from avr8_tracer.memory.program_memory import split_instruction
from avr8_tracer.memory.stack import Stack
from avr8_tracer.arch.avr8.opcodes import Opcode, Avr8Operation
from avr8_tracer.arch.avr8.state import Avr8CpuState
from .base import format_operand
from .maps import EXECUTE_MAP, OPERAND_FORMATS

# @intent:responsibility 24bitの命令ワードをデコードし、型付きのAvr8Operationを返します。
# @intent:post-condition 未定義のオペコードは kind=None, mnemonic="UNKNOWN" として返されます。
def decode_instruction(word: int) -> Avr8Operation:
    """
    命令ワードを opcode (bit 23-16), operand1 (bit 15-8), operand2 (bit 7-0) に分解します。
    """
    opcode, op1, op2 = split_instruction(word)
    kind = Opcode.lookup(opcode)
    if kind is None:
        return Avr8Operation(
            opcode_hex=f"{opcode:02X}", mnemonic="UNKNOWN", operands=[f"${opcode:02X}"],
            operand_bytes=[op1, op2], kind=None,
        )

    formats = OPERAND_FORMATS[kind]
    operands = [format_operand(fmt, value) for fmt, value in zip(formats, (op1, op2))]
    return Avr8Operation(
        opcode_hex=f"{opcode:02X}", mnemonic=kind.name, operands=operands,
        operand_bytes=[op1, op2], kind=kind,
    )

# @intent:responsibility デコードされたAVR8命令を実行し、CPUの状態を変更します。
# @intent:post-condition 実行できた場合はTrue、未定義命令の場合は何もせずFalseを返します。
def execute_instruction(operation: Avr8Operation, state: Avr8CpuState,
                        memory: DataMemory, stack: Stack) -> bool:
    if operation.kind is None:
        return False
    EXECUTE_MAP[operation.kind](state, memory, stack, operation)
    return True
