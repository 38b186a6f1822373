# tests/memory/test_stack.py
"""
avr8_tracer.memory.stackモジュールの単体テスト。
"""
import pytest

from avr8_tracer.memory.stack import Stack, StackPop, STACK_SIZE

# @intent:test_suite スタックのLIFO特性、ポインタの動き、満杯/空の境界を検証します。

class TestStack:
    # @intent:test_case_initial 初期状態でポインタが最上位を指し、空であることを検証します。
    def test_initial_state(self):
        stack = Stack()
        assert stack.capacity == STACK_SIZE == 1024
        assert stack.pointer == 1023
        assert stack.is_empty
        assert stack.last_added_value == 0

    # @intent:test_case_pointer 最初のプッシュはポインタを動かさず、以降はデクリメントされることを検証します。
    def test_pointer_movement(self):
        stack = Stack()
        stack.push(0x11)
        assert stack.pointer == 1023
        stack.push(0x22)
        assert stack.pointer == 1022
        assert stack.last_added_value == 0x22
        assert stack.pop() == StackPop(0x22, False)
        assert stack.pointer == 1023
        assert stack.pop().value == 0x11
        assert stack.pointer == 1023
        assert stack.is_empty

    # @intent:test_case_lifo 任意の列をプッシュすると逆順でポップされることを検証します。
    def test_lifo_order(self):
        stack = Stack()
        values = [3, 1, 4, 1, 5, 9, 2, 6]
        for value in values:
            assert stack.push(value)
        assert [stack.pop().value for _ in values] == list(reversed(values))

    # @intent:test_case_full 満杯のスタックへのプッシュは失敗し、状態を変更しないことを検証します。
    def test_push_when_full(self):
        stack = Stack(4)
        for value in range(4):
            assert stack.push(value)
        assert stack.is_full
        assert stack.pointer == 0
        assert not stack.push(0xFF)
        assert stack.size == 4
        assert stack.last_added_value == 3

    # @intent:test_case_empty 空のスタックからのポップは StackPop(0, True) を返し、ポインタを変更しないことを検証します。
    def test_pop_when_empty(self):
        stack = Stack()
        result = stack.pop()
        assert result == StackPop(0, underflow=True)
        assert stack.pointer == 1023

    def test_full_capacity_then_drain(self):
        stack = Stack()
        for value in range(STACK_SIZE):
            assert stack.push(value)
        assert not stack.push(0)
        assert [stack.pop().value for _ in range(STACK_SIZE)] == [v & 0xFF for v in reversed(range(STACK_SIZE))]
        assert stack.pop().underflow

    def test_reset(self):
        stack = Stack()
        stack.push(1)
        stack.push(2)
        stack.reset()
        assert stack.is_empty
        assert stack.pointer == 1023

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            Stack(0)
