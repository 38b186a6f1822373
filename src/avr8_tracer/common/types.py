"""
共通の型定義を提供するモジュール。
プロジェクト全体で使用される汎用的な型エイリアスなどを定義します。
"""
from typing import Dict, NamedTuple

# @intent:data_structure シンボル名とアドレスをマッピングする辞書の型エイリアス。
# Assembler, CPU, Config など複数のレイヤーで共通して使用されます。
SymbolMap = Dict[str, int]

# @intent:data_structure プログラムメモリ上のサブルーチン/ベクタ領域の開始アドレスと名前。
# 終端は次の領域の開始アドレス（最後の領域はプログラム長）で決まります。
class SubroutineRegion(NamedTuple):
    start: int
    name: str
