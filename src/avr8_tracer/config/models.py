from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

@dataclass
class ProgramSource:
    path: Optional[str] = None     # アセンブリファイル（構成ファイルからの相対パスは解決済み）
    listing: Optional[str] = None  # インラインのアセンブリソース

@dataclass
class RegionConfig:
    start: int
    name: str

@dataclass
class CpuInitialState:
    registers: Dict[str, int] = field(default_factory=dict)              # "R16", "XL" など
    inputs: Dict[Union[str, int], int] = field(default_factory=dict)     # "PINB" またはアドレス
    interrupts_enabled: bool = False

@dataclass
class SystemConfig:
    architecture: str = "AVR8"
    program: ProgramSource = field(default_factory=ProgramSource)
    regions: List[RegionConfig] = field(default_factory=list)  # 空の場合はラベルから生成
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
