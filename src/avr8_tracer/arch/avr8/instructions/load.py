# src/avr8_tracer/arch/avr8/instructions/load.py
"""
転送・I/O・スタック操作命令の実装。
"""
from avr8_tracer.memory.data_memory import DataMemory
from avr8_tracer.memory.stack import Stack
from avr8_tracer.arch.avr8.opcodes import Avr8Operation
from avr8_tracer.arch.avr8.state import Avr8CpuState
from .base import EXTENDED_OFFSET, read_pointer, push_byte, pop_byte

# --- NOP ---
# @intent:responsibility NOP命令を実行します（何もしません）。
def execute_nop(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    # Intentional: NOP (No Operation)
    pass

# --- LDI / MOV / CLR ---
# @intent:responsibility LDI命令を実行し、定数をレジスタにロードします。フラグは変化しません。
def execute_ldi(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.registers[op.operand1] = op.operand2

# @intent:responsibility MOV命令を実行し、レジスタ間でコピーします。
def execute_mov(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.registers[op.operand1] = state.registers[op.operand2]

# @intent:responsibility CLR命令を実行し、レジスタをゼロクリアします（フラグは変化しません）。
def execute_clr(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.registers[op.operand1] = 0x00

# --- OUT / IN (I/O領域, オフセットなし) ---
# @intent:responsibility OUT命令を実行し、レジスタの内容をI/O領域に書き込みます。
def execute_out(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    memory.write(op.operand1, state.registers[op.operand2])

# @intent:responsibility IN命令を実行し、I/O領域の内容をレジスタに読み込みます。
def execute_in(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.registers[op.operand1] = memory.read(op.operand2)

# --- STS / LDS (拡張領域, +256) ---
# @intent:responsibility STS命令を実行し、拡張領域 (operand1 + 256) に書き込みます。
def execute_sts(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    memory.write(op.operand1 + EXTENDED_OFFSET, state.registers[op.operand2])

# @intent:responsibility LDS命令を実行し、拡張領域 (operand2 + 256) から読み込みます。
def execute_lds(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.registers[op.operand1] = memory.read(op.operand2 + EXTENDED_OFFSET)

# --- STIO / LDIO / ST / LD (ポインタ間接) ---
# @intent:responsibility STIO命令を実行し、ポインタが指すI/O位置に書き込みます（オフセットなし）。
def execute_stio(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    memory.write(read_pointer(state, op.operand1), state.registers[op.operand2])

# @intent:responsibility LDIO命令を実行し、ポインタが指すI/O位置から読み込みます（オフセットなし）。
def execute_ldio(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.registers[op.operand1] = memory.read(read_pointer(state, op.operand2))

# @intent:responsibility ST命令を実行し、ポインタが指すデータ位置 (+256) に書き込みます。
def execute_st(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    address = read_pointer(state, op.operand1) + EXTENDED_OFFSET
    memory.write(address, state.registers[op.operand2])

# @intent:responsibility LD命令を実行し、ポインタが指すデータ位置 (+256) から読み込みます。
def execute_ld(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    address = read_pointer(state, op.operand2) + EXTENDED_OFFSET
    state.registers[op.operand1] = memory.read(address)

# --- PUSH / POP ---
# @intent:responsibility PUSH命令を実行し、レジスタの内容をスタックにプッシュします。
def execute_push(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    push_byte(stack, state.registers[op.operand1])

# @intent:responsibility POP命令を実行し、スタックからレジスタへポップします。空の場合は0がロードされます。
def execute_pop(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.registers[op.operand1] = pop_byte(stack)
