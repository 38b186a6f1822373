# src/avr8_tracer/arch/avr8/interrupts.py
"""
ピン変化割り込みコントローラ。

3つの入力ポート (PINB / PINC / PIND) を監視し、マスクで有効化されたビットが
前回のサンプルから変化していれば、共有フラグレジスタ PCIFR の該当ビットをセットします。
割り込みの受理は Iフラグ、PCIFRのフラグ、PCICRの許可ビットが全て揃った場合のみで、
優先順位は PCINT0 > PCINT1 > PCINT2 の固定です。
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from avr8_tracer.memory.data_memory import DataMemory, EXTENDED_OFFSET
from avr8_tracer.arch.avr8.state import StatusRegister
from avr8_tracer.arch.avr8 import io_map

PCICR_ADDRESS = io_map.PCICR + EXTENDED_OFFSET
PCIFR_ADDRESS = io_map.PCIFR + EXTENDED_OFFSET

# @intent:data_structure 1つのピン変化割り込み要因の定義。
@dataclass(frozen=True)
class PinChangeSource:
    name: str
    pin_address: int   # 監視する入力ポート（ベース領域）
    mask_address: int  # PCMSKn（拡張領域の絶対アドレス）
    bit: int           # PCICR の許可ビット / PCIFR のフラグビット
    vector: int

# @intent:constant 優先順位順に並べた割り込み要因。
PIN_CHANGE_SOURCES: Tuple[PinChangeSource, ...] = (
    PinChangeSource("PCINT0", io_map.PINB, io_map.PCMSK0 + EXTENDED_OFFSET, io_map.PCIF0, io_map.PCINT0_VECT),
    PinChangeSource("PCINT1", io_map.PINC, io_map.PCMSK1 + EXTENDED_OFFSET, io_map.PCIF1, io_map.PCINT1_VECT),
    PinChangeSource("PCINT2", io_map.PIND, io_map.PCMSK2 + EXTENDED_OFFSET, io_map.PCIF2, io_map.PCINT2_VECT),
)

# @intent:responsibility 割り込み要因の監視（エッジ検出）と、受理すべき割り込みの調停を行います。
class PinChangeInterruptController:
    def __init__(self, memory: DataMemory,
                 sources: Tuple[PinChangeSource, ...] = PIN_CHANGE_SOURCES):
        self._memory = memory
        self._sources = sources
        self._previous: List[int] = [0x00] * len(sources)

    @property
    def sources(self) -> Tuple[PinChangeSource, ...]:
        return self._sources

    # @intent:responsibility 各要因の前回サンプル（ラッチ）を返します（診断用）。
    @property
    def latches(self) -> List[int]:
        return list(self._previous)

    def reset(self) -> None:
        self._previous = [0x00] * len(self._sources)

    # @intent:responsibility 全要因の入力ポートをサンプリングし、変化があればフラグをセットします。
    # @intent:post-condition 前回サンプルは変化の有無にかかわらず常に更新されます。
    def monitor(self) -> None:
        for index, source in enumerate(self._sources):
            current = self._memory.peek(source.pin_address)
            mask = self._memory.peek(source.mask_address)
            if (current ^ self._previous[index]) & mask:
                self._update_flag(source.bit, True)
            self._previous[index] = current

    # @intent:responsibility 受理すべき割り込みを1つだけ選び、そのフラグをクリアして返します。
    # @intent:rationale 複数が保留中でも1サイクルで受理するのは最優先の1つのみ。残りはラッチされたまま次回に持ち越されます。
    def check_for_irq(self, sr: StatusRegister) -> Optional[PinChangeSource]:
        if not sr.i:
            return None
        flags = self._memory.peek(PCIFR_ADDRESS)
        control = self._memory.peek(PCICR_ADDRESS)
        for source in self._sources:
            mask = 1 << source.bit
            if flags & mask and control & mask:
                self._update_flag(source.bit, False)
                return source
        return None

    # @intent:responsibility PCIFRの1ビットを更新します。命令によるアクセスではないため、アクセスログには記録しません。
    def _update_flag(self, bit: int, flag: bool) -> None:
        flags = self._memory.peek(PCIFR_ADDRESS)
        if flag:
            flags |= 1 << bit
        else:
            flags &= ~(1 << bit)
        self._memory.poke(PCIFR_ADDRESS, flags)
