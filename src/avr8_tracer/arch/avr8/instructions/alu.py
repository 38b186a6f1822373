# src/avr8_tracer/arch/avr8/instructions/alu.py
"""
算術論理演算・比較・シフト命令の実装。
"""
from avr8_tracer.memory.data_memory import DataMemory
from avr8_tracer.memory.stack import Stack
from avr8_tracer.arch.avr8.alu import AluOperation, alu
from avr8_tracer.arch.avr8.opcodes import Avr8Operation
from avr8_tracer.arch.avr8.state import Avr8CpuState

# @intent:utility_function R[op1] = alu(operation, R[op1], 定数op2)
def _with_constant(state: Avr8CpuState, op: Avr8Operation, operation: AluOperation) -> None:
    regs = state.registers
    regs[op.operand1] = alu(operation, regs[op.operand1], op.operand2, state.sr)

# @intent:utility_function R[op1] = alu(operation, R[op1], R[op2])
def _with_register(state: Avr8CpuState, op: Avr8Operation, operation: AluOperation) -> None:
    regs = state.registers
    regs[op.operand1] = alu(operation, regs[op.operand1], regs[op.operand2], state.sr)

# --- ORI / ANDI / XORI ---
def execute_ori(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_constant(state, op, AluOperation.OR)

def execute_andi(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_constant(state, op, AluOperation.AND)

def execute_xori(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_constant(state, op, AluOperation.XOR)

# --- OR / AND / XOR ---
def execute_or(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_register(state, op, AluOperation.OR)

def execute_and(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_register(state, op, AluOperation.AND)

def execute_xor(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_register(state, op, AluOperation.XOR)

# --- ADDI / SUBI / ADD / SUB ---
def execute_addi(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_constant(state, op, AluOperation.ADD)

def execute_subi(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_constant(state, op, AluOperation.SUB)

def execute_add(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_register(state, op, AluOperation.ADD)

def execute_sub(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    _with_register(state, op, AluOperation.SUB)

# --- INC / DEC ---
# @intent:responsibility INC命令を実行します。ALUのADDを経由するため、Cフラグも更新されます。
def execute_inc(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    regs = state.registers
    regs[op.operand1] = alu(AluOperation.ADD, regs[op.operand1], 1, state.sr)

# @intent:responsibility DEC命令を実行します。ALUのSUBを経由するため、Cフラグも更新されます。
def execute_dec(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    regs = state.registers
    regs[op.operand1] = alu(AluOperation.SUB, regs[op.operand1], 1, state.sr)

# --- CPI / CP ---
# @intent:responsibility CPI命令を実行し、減算結果（保存しない）に基づいてフラグを更新します。
def execute_cpi(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    # Result is NOT stored
    alu(AluOperation.SUB, state.registers[op.operand1], op.operand2, state.sr)

# @intent:responsibility CP命令を実行し、レジスタ同士の減算結果（保存しない）に基づいてフラグを更新します。
def execute_cp(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    regs = state.registers
    alu(AluOperation.SUB, regs[op.operand1], regs[op.operand2], state.sr)

# --- LSL / LSR ---
# @intent:responsibility LSL命令を実行します。フラグは変化しません。
def execute_lsl(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.registers[op.operand1] = (state.registers[op.operand1] << 1) & 0xFF

# @intent:responsibility LSR命令を実行します。フラグは変化しません。
def execute_lsr(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.registers[op.operand1] = state.registers[op.operand1] >> 1
