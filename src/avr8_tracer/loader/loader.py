# avr8_tracer/loader/loader.py
"""
コードローダーモジュール。
アセンブリソースファイルを命令ワード列に変換し、プログラムメモリへ渡せる形にします。
"""
import logging
from typing import List, Tuple

from avr8_tracer.common.types import SymbolMap, SubroutineRegion
from .assembler import Avr8Assembler

logger = logging.getLogger(__name__)

# @intent:utility_function ラベルをアドレス順に並べ、サブルーチン領域表を作ります。
def regions_from_symbols(symbol_map: SymbolMap) -> List[SubroutineRegion]:
    """
    同じアドレスに複数のラベルがある場合は、ソース上で先に定義された名前を採用します。
    """
    regions = {}
    for name, address in symbol_map.items():
        regions.setdefault(address, name)
    return [SubroutineRegion(start, name) for start, name in sorted(regions.items())]

class AssemblyLoader:
    """
    アセンブリソースコードを解析し、シンボル情報と命令ワード列を返す簡易ローダー。
    """
    def load_assembly(self, file_path: str) -> Tuple[SymbolMap, List[int]]:
        with open(file_path, 'r', encoding="utf-8") as f:
            lines = f.readlines()
        return self.assemble_lines(lines)

    def assemble_lines(self, lines: List[str]) -> Tuple[SymbolMap, List[int]]:
        symbol_map, words = Avr8Assembler().assemble(lines)
        logger.debug("Assembled %d instructions, %d labels", len(words), len(symbol_map))
        return symbol_map, words
