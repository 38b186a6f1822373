# avr8_tracer/memory/program_memory.py
"""
Memory Layer (プログラムメモリ)

最大256命令を格納する書き込み一回限りのプログラムメモリ。
各命令は24bit (opcode:8, operand1:8, operand2:8) にパックされています。
"""
import bisect
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from avr8_tracer.common.types import SubroutineRegion

logger = logging.getLogger(__name__)

PROGRAM_MEMORY_SIZE = 256
INSTRUCTION_MASK = 0xFFFFFF
UNKNOWN_REGION = "Unknown"

# @intent:utility_function 命令を24bitのマシンコードに組み立てます。
def encode_instruction(opcode: int, operand1: int = 0, operand2: int = 0) -> int:
    """
    bit 23-16 = opcode, bit 15-8 = operand1, bit 7-0 = operand2
    """
    return ((opcode & 0xFF) << 16) | ((operand1 & 0xFF) << 8) | (operand2 & 0xFF)

# @intent:utility_function 24bitのマシンコードを (opcode, operand1, operand2) に分解します。
def split_instruction(word: int) -> Tuple[int, int, int]:
    return (word >> 16) & 0xFF, (word >> 8) & 0xFF, word & 0xFF

# @intent:responsibility 命令列の保持と、アドレスからサブルーチン名への逆引きを提供します。
class ProgramMemory:
    """
    書き込み一回限りのプログラムメモリ。
    2回目以降の write() は何もしません（リセット時の再ロードは無害）。
    """
    def __init__(self, capacity: int = PROGRAM_MEMORY_SIZE):
        self._capacity = capacity
        self._data: List[int] = [0] * capacity
        self._length = 0
        self._regions: List[SubroutineRegion] = []
        self._initialized = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        """書き込まれたプログラムの命令数。"""
        return self._length

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def regions(self) -> List[SubroutineRegion]:
        return list(self._regions)

    # @intent:responsibility 命令列と領域テーブルを一度だけ書き込みます。
    # @intent:pre-condition 命令数は容量以下である必要があります（超過は構成エラーとしてValueError）。
    # @intent:post-condition 初回はTrue、既に初期化済みの場合は何もせずFalseを返します。
    def write(self, instructions: Sequence[int],
              regions: Optional[Iterable[Tuple[int, str]]] = None) -> bool:
        if self._initialized:
            return False
        if len(instructions) > self._capacity:
            raise ValueError(
                f"Program of {len(instructions)} instructions does not fit in "
                f"program memory of {self._capacity} instructions."
            )

        for address, word in enumerate(instructions):
            self._data[address] = word & INSTRUCTION_MASK
        self._length = len(instructions)
        self._regions = sorted(
            (SubroutineRegion(start, name) for start, name in (regions or [])),
            key=lambda region: region.start,
        )
        self._initialized = True
        logger.debug("Program memory loaded: %d instructions, %d regions",
                     self._length, len(self._regions))
        return True

    # @intent:responsibility 指定アドレスの命令を返します。範囲外の場合はNOP(0)を返します。
    def read(self, address: int) -> int:
        if 0 <= address < self._capacity:
            return self._data[address]
        return 0x000000

    # @intent:responsibility アドレスが属するサブルーチン/ベクタ領域の名前を返します（診断用）。
    def subroutine_name(self, address: int) -> str:
        if not 0 <= address < self._length or not self._regions:
            return UNKNOWN_REGION
        starts = [region.start for region in self._regions]
        index = bisect.bisect_right(starts, address) - 1
        if index < 0:
            return UNKNOWN_REGION
        return self._regions[index].name
