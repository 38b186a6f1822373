# avr8_tracer/loader/assembler.py
"""
AVR8用の2パスアセンブラ。
AssemblyLoaderから利用されます。

構文:
    label:  MNEMONIC op1, op2   ; comment
    ORG 8                       ; 以降の配置アドレスを変更（隙間はNOPで埋める）
    .EQU LED1, 0                ; 定数定義
    .DW 0x160800                ; 生の命令ワード
オペランドには数値 (10, 0x0A, $0A, 0Ah)、レジスタ (R0-R31, XL/XH/YL/YH/X/Y)、
周辺レジスタ名 (DDRB..PCMSK2)、ラベル、および簡単な式 (~ << >> | & ^ + - *, LOW(), HIGH()) を使用できます。
"""
import ast
import operator
import re
from typing import Dict, List, Optional, Tuple

from avr8_tracer.common.types import SymbolMap
from avr8_tracer.memory.program_memory import PROGRAM_MEMORY_SIZE, encode_instruction
from avr8_tracer.arch.avr8.io_map import IO_REGISTERS, register_index
from avr8_tracer.arch.avr8.opcodes import Opcode
from avr8_tracer.arch.avr8.instructions.maps import OPERAND_FORMATS

_BINARY_OPERATORS = {
    ast.BitOr: operator.or_, ast.BitAnd: operator.and_, ast.BitXor: operator.xor,
    ast.LShift: operator.lshift, ast.RShift: operator.rshift,
    ast.Add: operator.add, ast.Sub: operator.sub, ast.Mult: operator.mul,
}
_UNARY_OPERATORS = {ast.Invert: operator.invert, ast.USub: operator.neg, ast.UAdd: operator.pos}
_FUNCTIONS = {
    "LOW": lambda value: value & 0xFF,
    "HIGH": lambda value: (value >> 8) & 0xFF,
}

ParsedLine = Tuple[Optional[str], Optional[str], Optional[str]]

# @intent:responsibility AVR8アセンブリソースを命令ワード列とラベル表に変換します。
class Avr8Assembler:
    """
    1パス目でラベルと定数のアドレスを確定し、2パス目で命令ワードを生成します。
    エラーは行番号付きのValueErrorとして送出されます。
    """
    def __init__(self, capacity: int = PROGRAM_MEMORY_SIZE):
        self._capacity = capacity
        self._constants: Dict[str, int] = {}

    # @intent:responsibility ソース行を解析し、(シンボルマップ, 命令ワード列) を返します。
    # @intent:post-condition シンボルマップにはラベルのみが含まれます（.EQU定数は含まれません）。
    def assemble(self, lines: List[str]) -> Tuple[SymbolMap, List[int]]:
        self._constants = {}
        symbol_map: SymbolMap = {}
        parsed_lines = [self._parse_line(line) for line in lines]

        # First pass: ラベルと定数
        # 命令を伴わないラベルは、直後のORGが指定するアドレスに束縛します。
        temp_pc = 0
        pending: List[str] = []
        origins: Dict[int, int] = {}
        for line_num, (label, mnemonic, operands) in enumerate(parsed_lines, 1):
            if label:
                if label in symbol_map:
                    raise ValueError(f"Duplicate label '{label}' on line {line_num}")
                symbol_map[label] = temp_pc
                pending.append(label)
            if not mnemonic:
                continue
            if mnemonic == ".EQU":
                name, value = self._split_equ(operands, line_num)
                self._constants[name] = self._evaluate(value, symbol_map, line_num)
            elif mnemonic == "ORG":
                temp_pc = self._evaluate(operands, symbol_map, line_num)
                origins[line_num] = temp_pc
                for name in pending:
                    symbol_map[name] = temp_pc
                pending = []
            else:
                temp_pc += 1
                pending = []

        # Second pass: 命令ワードの生成
        words: List[int] = []
        for line_num, (label, mnemonic, operands) in enumerate(parsed_lines, 1):
            if not mnemonic or mnemonic == ".EQU":
                continue
            if mnemonic == "ORG":
                origin = origins[line_num]
                if origin < len(words):
                    raise ValueError(f"ORG ${origin:02X} moves backwards on line {line_num}")
                words.extend([0] * (origin - len(words)))
            elif mnemonic == ".DW":
                words.append(self._evaluate(operands, symbol_map, line_num) & 0xFFFFFF)
            else:
                words.append(self._assemble_instruction(mnemonic, operands, symbol_map, line_num))

            if len(words) > self._capacity:
                raise ValueError(
                    f"Program exceeds {self._capacity} instructions on line {line_num}")

        return symbol_map, words

    def _parse_line(self, line: str) -> ParsedLine:
        line = line.split(';')[0].strip()
        if not line:
            return None, None, None

        label = None
        if ':' in line:
            label, rest = line.split(':', 1)
            label = label.strip()
            line = rest.strip()

        if not line:
            return label, None, None

        parts = re.split(r'\s+', line, maxsplit=1)
        mnemonic = parts[0].upper()
        operands = parts[1] if len(parts) > 1 else ""

        return label, mnemonic, operands

    def _split_equ(self, operands: str, line_num: int) -> Tuple[str, str]:
        parts = [part.strip() for part in operands.split(',', 1)]
        if len(parts) != 2 or not parts[0].isidentifier():
            raise ValueError(f"Invalid .EQU directive on line {line_num}: {operands}")
        return parts[0], parts[1]

    # @intent:responsibility 1命令をオペランド数を検証した上で24bitワードに組み立てます。
    def _assemble_instruction(self, mnemonic: str, operands: str,
                              symbol_map: SymbolMap, line_num: int) -> int:
        kind = Opcode.__members__.get(mnemonic)
        if kind is None:
            raise ValueError(f"Unknown mnemonic '{mnemonic}' on line {line_num}")

        formats = OPERAND_FORMATS[kind]
        values = [value.strip() for value in operands.split(',')] if operands.strip() else []
        if len(values) != len(formats):
            raise ValueError(
                f"{mnemonic} expects {len(formats)} operand(s), got {len(values)} on line {line_num}")

        operand_bytes = [0, 0]
        for index, (fmt, text) in enumerate(zip(formats, values)):
            if fmt in ("r", "p"):
                operand_bytes[index] = self._parse_register(text, line_num)
            else:
                operand_bytes[index] = self._parse_val(text, symbol_map, line_num) & 0xFF

        return encode_instruction(kind.value, *operand_bytes)

    def _parse_register(self, text: str, line_num: int) -> int:
        index = register_index(text)
        if index is not None:
            return index
        raise ValueError(f"Invalid register '{text}' on line {line_num}")

    def _parse_val(self, val_str: str, symbol_map: SymbolMap, line_num: int = 0) -> int:
        return self._evaluate(val_str, symbol_map, line_num)

    # @intent:responsibility 数値・シンボル・簡単な式を評価します。
    # @intent:rationale Pythonの式構文に正規化してからASTを辿り、許可された演算子だけを評価します。
    def _evaluate(self, text: str, symbol_map: SymbolMap, line_num: int) -> int:
        source = text.strip()
        source = re.sub(r'\$([0-9A-Fa-f]+)', r'0x\1', source)
        source = re.sub(r'\b([0-9][0-9A-Fa-f]*)[hH]\b', r'0x\1', source)
        source = re.sub(r"\b0+(\d)", r"\1", source)
        try:
            tree = ast.parse(source, mode="eval")
        except SyntaxError:
            raise ValueError(f"Invalid value '{text}' on line {line_num}")
        return self._evaluate_node(tree.body, symbol_map, text, line_num)

    def _evaluate_node(self, node: ast.AST, symbol_map: SymbolMap, text: str, line_num: int) -> int:
        if isinstance(node, ast.Constant) and isinstance(node.value, int):
            return node.value
        if isinstance(node, ast.Name):
            return self._resolve_symbol(node.id, symbol_map, line_num)
        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
            left = self._evaluate_node(node.left, symbol_map, text, line_num)
            right = self._evaluate_node(node.right, symbol_map, text, line_num)
            return _BINARY_OPERATORS[type(node.op)](left, right)
        if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
            return _UNARY_OPERATORS[type(node.op)](
                self._evaluate_node(node.operand, symbol_map, text, line_num))
        if (isinstance(node, ast.Call) and isinstance(node.func, ast.Name)
                and node.func.id.upper() in _FUNCTIONS and len(node.args) == 1 and not node.keywords):
            argument = self._evaluate_node(node.args[0], symbol_map, text, line_num)
            return _FUNCTIONS[node.func.id.upper()](argument)
        raise ValueError(f"Unsupported expression '{text}' on line {line_num}")

    def _resolve_symbol(self, name: str, symbol_map: SymbolMap, line_num: int) -> int:
        if name in self._constants:
            return self._constants[name]
        if name in symbol_map:
            return symbol_map[name]
        if name.upper() in IO_REGISTERS:
            return IO_REGISTERS[name.upper()]
        raise ValueError(f"Undefined symbol '{name}' on line {line_num}")
