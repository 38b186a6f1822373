# src/avr8_tracer/arch/avr8/instructions/control.py
"""
制御命令（ジャンプ、条件分岐、サブルーチン、割り込み許可）の実装。

条件分岐は直前のALU演算/比較で確定したフラグを参照します。
大小比較にNではなくS (= N xor V) を用いるため、符号付きオーバーフローが発生しても正しく判定されます。
"""
from avr8_tracer.memory.data_memory import DataMemory
from avr8_tracer.memory.stack import Stack
from avr8_tracer.arch.avr8.opcodes import Avr8Operation
from avr8_tracer.arch.avr8.state import Avr8CpuState
from .base import push_byte, pop_byte

# --- JMP ---
# @intent:responsibility JMP命令を実行し、PCを operand1 に設定します。
def execute_jmp(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.pc = op.operand1

# --- 条件分岐 ---
def execute_breq(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    if state.sr.z:
        state.pc = op.operand1

def execute_brne(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    if not state.sr.z:
        state.pc = op.operand1

def execute_brge(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    if not state.sr.s:
        state.pc = op.operand1

def execute_brgt(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    if not state.sr.s and not state.sr.z:
        state.pc = op.operand1

def execute_brle(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    if state.sr.s or state.sr.z:
        state.pc = op.operand1

def execute_brlt(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    if state.sr.s:
        state.pc = op.operand1

# --- CALL / RET / RETI ---
# @intent:responsibility CALL命令を実行し、戻りアドレスをスタックにプッシュしてからジャンプします。
def execute_call(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    # state.pc is already pointing to the NEXT instruction (incremented in FETCH)
    push_byte(stack, state.pc)
    state.pc = op.operand1

# @intent:responsibility RET命令を実行し、スタックから戻りアドレスをポップしてPCに設定します。
def execute_ret(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.pc = pop_byte(stack)

# @intent:responsibility RETI命令を実行し、戻りアドレスを復元した後にIフラグを再セットします。
# @intent:rationale 割り込みによって退避/復元されるのはPCとIフラグのみです。他のフラグは保存されません。
def execute_reti(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.pc = pop_byte(stack)
    state.sr.i = True

# --- SEI / CLI ---
def execute_sei(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.sr.i = True

def execute_cli(state: Avr8CpuState, memory: DataMemory, stack: Stack, op: Avr8Operation) -> None:
    state.sr.i = False
