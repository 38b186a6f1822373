# avr8_tracer/core/state.py
"""
Core Layer (CPU状態)

このモジュールは、CPUの基本的な状態（プログラムカウンタと命令サイクルのフェーズ）を
保持するデータ構造を定義します。
"""
from dataclasses import dataclass
from enum import Enum

# @intent:responsibility 命令サイクルの3つのフェーズを定義します。
# @intent:rationale FETCH -> DECODE -> EXECUTE -> FETCH と循環し、終端状態は存在しません。
class CpuPhase(Enum):
    FETCH = "FETCH"
    DECODE = "DECODE"
    EXECUTE = "EXECUTE"

# @intent:responsibility CPUのレジスタ状態を保持します。アーキテクチャ固有のレジスタはこれを拡張します。
@dataclass
class CpuState:
    """
    CPUの状態を保持するデータクラス。
    これは抽象的な基底状態であり、特定のCPUアーキテクチャに応じて拡張されます。
    """
    pc: int = 0x00  # Program Counter
    phase: CpuPhase = CpuPhase.FETCH
    # @intent:rationale リセット直後は常にFETCHから開始する。これがリセット後の唯一の再開点となる。
