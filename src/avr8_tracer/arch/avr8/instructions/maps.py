"""
オペコードと命令実装のマッピング定義。
"""
from avr8_tracer.arch.avr8.opcodes import Opcode
from . import load
from . import alu
from . import control

# @intent:map Opcodeから実行関数へのマッピングテーブル。全てのOpcodeを網羅します。
EXECUTE_MAP = {
    # Data transfer / I/O
    Opcode.NOP: load.execute_nop,
    Opcode.LDI: load.execute_ldi,
    Opcode.MOV: load.execute_mov,
    Opcode.OUT: load.execute_out,
    Opcode.IN: load.execute_in,
    Opcode.STS: load.execute_sts,
    Opcode.LDS: load.execute_lds,
    Opcode.CLR: load.execute_clr,
    Opcode.STIO: load.execute_stio,
    Opcode.LDIO: load.execute_ldio,
    Opcode.ST: load.execute_st,
    Opcode.LD: load.execute_ld,
    Opcode.PUSH: load.execute_push,
    Opcode.POP: load.execute_pop,

    # ALU
    Opcode.ORI: alu.execute_ori,
    Opcode.ANDI: alu.execute_andi,
    Opcode.XORI: alu.execute_xori,
    Opcode.OR: alu.execute_or,
    Opcode.AND: alu.execute_and,
    Opcode.XOR: alu.execute_xor,
    Opcode.ADDI: alu.execute_addi,
    Opcode.SUBI: alu.execute_subi,
    Opcode.ADD: alu.execute_add,
    Opcode.SUB: alu.execute_sub,
    Opcode.INC: alu.execute_inc,
    Opcode.DEC: alu.execute_dec,
    Opcode.CPI: alu.execute_cpi,
    Opcode.CP: alu.execute_cp,
    Opcode.LSL: alu.execute_lsl,
    Opcode.LSR: alu.execute_lsr,

    # Control
    Opcode.JMP: control.execute_jmp,
    Opcode.BREQ: control.execute_breq,
    Opcode.BRNE: control.execute_brne,
    Opcode.BRGE: control.execute_brge,
    Opcode.BRGT: control.execute_brgt,
    Opcode.BRLE: control.execute_brle,
    Opcode.BRLT: control.execute_brlt,
    Opcode.CALL: control.execute_call,
    Opcode.RET: control.execute_ret,
    Opcode.RETI: control.execute_reti,
    Opcode.SEI: control.execute_sei,
    Opcode.CLI: control.execute_cli,
}

# @intent:map 表示用のオペランド種別 (r: レジスタ, p: ポインタ, k: 定数, a: I/Oアドレス, l: プログラムアドレス)。
OPERAND_FORMATS = {
    Opcode.NOP: "", Opcode.RET: "", Opcode.RETI: "", Opcode.SEI: "", Opcode.CLI: "",
    Opcode.LDI: "rk", Opcode.MOV: "rr",
    Opcode.OUT: "ar", Opcode.IN: "ra",
    Opcode.STS: "ar", Opcode.LDS: "ra",
    Opcode.CLR: "r", Opcode.INC: "r", Opcode.DEC: "r",
    Opcode.PUSH: "r", Opcode.POP: "r", Opcode.LSL: "r", Opcode.LSR: "r",
    Opcode.ORI: "rk", Opcode.ANDI: "rk", Opcode.XORI: "rk",
    Opcode.ADDI: "rk", Opcode.SUBI: "rk", Opcode.CPI: "rk",
    Opcode.OR: "rr", Opcode.AND: "rr", Opcode.XOR: "rr",
    Opcode.ADD: "rr", Opcode.SUB: "rr", Opcode.CP: "rr",
    Opcode.JMP: "l", Opcode.CALL: "l",
    Opcode.BREQ: "l", Opcode.BRNE: "l", Opcode.BRGE: "l",
    Opcode.BRGT: "l", Opcode.BRLE: "l", Opcode.BRLT: "l",
    Opcode.STIO: "pr", Opcode.ST: "pr",
    Opcode.LDIO: "rp", Opcode.LD: "rp",
}
