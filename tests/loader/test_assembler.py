# tests/loader/test_assembler.py
"""
avr8_tracer.loader.assemblerモジュールの単体テスト。
"""
import pytest

from avr8_tracer.memory.program_memory import encode_instruction
from avr8_tracer.arch.avr8.opcodes import Opcode
from avr8_tracer.loader.assembler import Avr8Assembler

# @intent:test_suite アセンブラの構文解析、シンボル解決、式の評価、エラー検出を検証します。

def _assemble(source: str):
    return Avr8Assembler().assemble(source.splitlines())

# @intent:test_case_basic ラベル、コメント、前方参照を含むソースを正しくアセンブルすることを検証します。
def test_basic_program_with_forward_reference():
    symbols, words = _assemble("""
    ; comment line
    start:  LDI R16, 5      ; five
            LDI R17, 3
            SUB R16, R17
            BRGT target
            NOP
    target: JMP start
    """)
    assert symbols == {"start": 0, "target": 5}
    assert words == [
        encode_instruction(Opcode.LDI, 16, 5),
        encode_instruction(Opcode.LDI, 17, 3),
        encode_instruction(Opcode.SUB, 16, 17),
        encode_instruction(Opcode.BRGT, 5),
        encode_instruction(Opcode.NOP),
        encode_instruction(Opcode.JMP, 0),
    ]

# @intent:test_case_number_formats 10進・0x・$・h接尾辞の数値表記を受け付けることを検証します。
@pytest.mark.parametrize("text, value", [
    ("10", 10), ("0x1F", 0x1F), ("$1F", 0x1F), ("1Fh", 0x1F), ("0FFh", 0xFF), ("08", 8),
])
def test_number_formats(text, value):
    _, words = _assemble(f"LDI R16, {text}")
    assert words == [encode_instruction(Opcode.LDI, 16, value)]

# @intent:test_case_registers レジスタ名、ポインタ別名、周辺レジスタ名が解決されることを検証します。
def test_register_and_peripheral_names():
    _, words = _assemble("""
        ld r16, X
        ST Y, R31
        LDI xh, 3
        OUT PORTB, R16
        IN R17, pinb
        STS PCMSK0, R17
    """)
    assert words == [
        encode_instruction(Opcode.LD, 16, 28),
        encode_instruction(Opcode.ST, 30, 31),
        encode_instruction(Opcode.LDI, 29, 3),
        encode_instruction(Opcode.OUT, 0x01, 16),
        encode_instruction(Opcode.IN, 17, 0x02),
        encode_instruction(Opcode.STS, 0x10, 17),
    ]

# @intent:test_case_expressions .EQU定数と式 (~, <<, LOW, HIGH) を評価できることを検証します。
def test_equ_and_expressions():
    _, words = _assemble("""
        .EQU LED1, 0
        .EQU counter, 1000
        ANDI R16, ~(1 << LED1)
        ORI R16, (1 << 5) | 1
        LDI XL, LOW(counter)
        LDI XH, high(counter)
    """)
    assert [w & 0xFF for w in words] == [0xFE, 0x21, 0xE8, 0x03]

# @intent:test_case_org ORGによる配置と、隙間のNOP埋めを検証します。
def test_org_pads_with_nop():
    symbols, words = _assemble("""
        JMP main
        ORG 8
    main: RET
    """)
    assert symbols["main"] == 8
    assert len(words) == 9
    assert words[1:8] == [0] * 7

# @intent:test_case_org_label ORGのオペランドに定義済みのラベルを含む式を使用できることを検証します。
def test_org_accepts_label_expression():
    symbols, words = _assemble("""
    start: NOP
        ORG start+2
    next: RET
    """)
    assert symbols == {"start": 0, "next": 2}
    assert words == [0, 0, encode_instruction(Opcode.RET, 0, 0)]

# @intent:test_case_label_before_org 単独行のラベルは直後のORGのアドレスに束縛されることを検証します。
def test_standalone_label_binds_after_org():
    symbols, words = _assemble("""
        JMP main
    main:
        ORG 8
        RET
    """)
    assert symbols["main"] == 8
    assert words[0] == encode_instruction(Opcode.JMP, 8, 0)
    assert len(words) == 9

def test_raw_word_directive():
    _, words = _assemble(".DW 0x3F0102")
    assert words == [0x3F0102]

@pytest.mark.parametrize("source, message", [
    ("FOO R1", "Unknown mnemonic"),
    ("LDI R16", "expects 2 operand"),
    ("RET R16", "expects 0 operand"),
    ("LDI R32, 1", "Invalid register"),
    ("MOV R1, 5", "Invalid register"),
    ("JMP nowhere", "Undefined symbol"),
    ("LDI R16, 1 +", "Invalid value"),
    ("LDI R16, 2 ** 3", "Unsupported expression"),
    ("a: NOP\na: NOP", "Duplicate label"),
    ("ORG 4\nNOP\nORG 2", "moves backwards"),
    (".EQU 5, 1", "Invalid .EQU"),
])
def test_errors(source, message):
    with pytest.raises(ValueError, match=message):
        _assemble(source)

# @intent:test_case_oversize 256命令を超えるプログラムはエラーとなることを検証します。
def test_program_too_large():
    with pytest.raises(ValueError, match="exceeds 256"):
        _assemble("\n".join(["NOP"] * 257))
    _, words = _assemble("\n".join(["NOP"] * 256))
    assert len(words) == 256

def test_error_reports_line_number():
    with pytest.raises(ValueError, match="line 3"):
        _assemble("NOP\nNOP\nBOGUS")
