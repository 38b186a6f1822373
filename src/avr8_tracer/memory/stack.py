# avr8_tracer/memory/stack.py
"""
Memory Layer (スタック)

1024バイト固定容量のLIFOスタック。スタックポインタは最上位アドレスから開始し、
プッシュのたびにデクリメントされます。
"""
from typing import NamedTuple

STACK_SIZE = 1024

# @intent:data_structure ポップ結果。underflowはスタックが空だった場合にTrueとなります。
# @intent:rationale 空スタックからのポップは値0とunderflow=Trueを返します。呼び出し側はフラグを無視してもかまいません。
class StackPop(NamedTuple):
    value: int
    underflow: bool = False

# @intent:responsibility 有界なバイトスタックを提供します。
class Stack:
    """
    固定容量のバイトスタック。
    満杯時のプッシュと空時のポップはどちらも状態を変更しません。
    """
    def __init__(self, capacity: int = STACK_SIZE):
        if not isinstance(capacity, int) or capacity <= 0:
            raise ValueError("Stack capacity must be a positive integer.")
        self._capacity = capacity
        self.reset()

    # @intent:responsibility スタックの内容を全てクリアし、ポインタを最上位に戻します。
    def reset(self) -> None:
        self._data = bytearray(self._capacity)
        self._sp = self._capacity - 1
        self._count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        return self._count

    @property
    def is_empty(self) -> bool:
        return self._count == 0

    @property
    def is_full(self) -> bool:
        return self._count == self._capacity

    # @intent:responsibility 現在のスタックポインタ（診断用）を返します。
    @property
    def pointer(self) -> int:
        return self._sp

    # @intent:responsibility 最後にプッシュされた値（診断用）を返します。空の場合は0。
    @property
    def last_added_value(self) -> int:
        if self.is_empty:
            return 0x00
        return self._data[self._sp]

    # @intent:responsibility 8bit値をスタックに積みます。
    # @intent:post-condition 満杯の場合は何も変更せずFalseを返します。
    def push(self, value: int) -> bool:
        if self.is_full:
            return False
        if not self.is_empty:
            self._sp -= 1
        self._data[self._sp] = value & 0xFF
        self._count += 1
        return True

    # @intent:responsibility 最後に積まれた値を取り出します。
    # @intent:post-condition 空の場合はポインタを変更せず StackPop(0, True) を返します。
    def pop(self) -> StackPop:
        if self.is_empty:
            return StackPop(0x00, underflow=True)
        value = self._data[self._sp]
        self._count -= 1
        if not self.is_empty:
            self._sp += 1
        return StackPop(value)
