# avr8_tracer/memory/data_memory.py
"""
Memory Layer (データメモリ)

このモジュールは、I/O領域(0-255)と拡張領域(256-1999)を持つ
2000バイトのデータメモリを提供します。
範囲外アクセスは例外を投げず、書き込みは失敗を返し、読み込みは0を返します。
"""
from dataclasses import dataclass
from enum import Enum
from typing import List

DATA_MEMORY_SIZE = 2000
IO_REGION_SIZE = 256
EXTENDED_OFFSET = 256  # STS/LDS/ST/LD が付加するオフセット

# @intent:responsibility メモリアクセスを記録するためのタイプを定義します。
class MemoryAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のメモリアクセス操作を記録します。
@dataclass(frozen=True) # 不変データ構造
class MemoryAccess:
    """
    データメモリ上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int # 8bit value
    access_type: MemoryAccessType

# @intent:responsibility アドレス指定可能なバイト配列と、アクセスログを提供します。
# @intent:rationale 全てのアクセスを記録し、Snapshotに含めることで命令ごとの副作用を観測可能にします。
class DataMemory:
    """
    I/O領域と拡張領域に論理分割されたデータメモリ。
    メモリ自身はオフセットを関知せず、呼び出し側が +256 を付加します。
    """
    # @intent:responsibility 指定されたサイズのメモリ領域を初期化します。
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int = DATA_MEMORY_SIZE):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("Data memory size must be a positive integer.")
        self._memory = bytearray(size)
        self._size = size
        self._activity_log: List[MemoryAccess] = []

    def __len__(self) -> int:
        return self._size

    # @intent:responsibility メモリ全体をゼロクリアします。
    def reset(self) -> None:
        self._memory = bytearray(self._size)
        self._activity_log = []

    def _in_range(self, address: int) -> bool:
        return 0 <= address < self._size

    def _log_access(self, address: int, data: int, access_type: MemoryAccessType) -> None:
        self._activity_log.append(MemoryAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録されたアクセスログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[MemoryAccess]:
        """
        現在のアクセスログを返し、内部ログをクリアします。
        """
        log = self._activity_log
        self._activity_log = []
        return log

    # @intent:responsibility 指定されたアドレスに8bitのデータを書き込みます。
    # @intent:post-condition 範囲外の場合は何も変更せずFalseを返します。
    def write(self, address: int, value: int) -> bool:
        if not self._in_range(address):
            return False
        value &= 0xFF
        self._memory[address] = value
        self._log_access(address, value, MemoryAccessType.WRITE)
        return True

    # @intent:responsibility 指定されたアドレスから8bitのデータを読み出します。
    # @intent:post-condition 範囲外の場合は0を返します。例外は発生しません。
    def read(self, address: int) -> int:
        if not self._in_range(address):
            return 0x00
        data = self._memory[address]
        self._log_access(address, data, MemoryAccessType.READ)
        return data

    # @intent:responsibility ログを記録せずに指定されたアドレスからデータを読み出します。
    def peek(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します（ログ記録なし）。
        割り込みモニタや診断表示用。
        """
        if not self._in_range(address):
            return 0x00
        return self._memory[address]

    # @intent:responsibility ログを記録せずに指定されたアドレスへ書き込みます。
    # @intent:rationale 外部ドライバによるピン入力の注入や割り込みフラグの更新は命令実行ではないため、アクセスログに残しません。
    def poke(self, address: int, value: int) -> bool:
        if not self._in_range(address):
            return False
        self._memory[address] = value & 0xFF
        return True

    # @intent:responsibility 指定レジスタの1ビットをセットします（read-modify-write）。
    def set_bit(self, address: int, bit: int) -> bool:
        data = self.read(address)
        return self.write(address, data | (1 << bit))

    # @intent:responsibility 指定レジスタの1ビットをクリアします（read-modify-write）。
    def clear_bit(self, address: int, bit: int) -> bool:
        data = self.read(address)
        return self.write(address, data & ~(1 << bit))
