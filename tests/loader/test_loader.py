# tests/loader/test_loader.py
"""
avr8_tracer.loader.loaderモジュールの単体テスト。
"""
import os

import pytest

from avr8_tracer.common.types import SubroutineRegion
from avr8_tracer.loader.loader import AssemblyLoader, regions_from_symbols

FIRMWARE_PATH = os.path.join(os.path.dirname(__file__), "..", "data", "led_toggle.asm")

# @intent:test_suite アセンブリファイルの読み込みと、ラベルからの領域表生成を検証します。

class TestAssemblyLoader:
    # @intent:test_case_firmware ボタン/LEDファームウェアが期待どおりのアドレス配置でアセンブルされることを検証します。
    def test_load_firmware(self):
        symbols, words = AssemblyLoader().load_assembly(FIRMWARE_PATH)
        assert len(words) == 40
        assert symbols == {
            "RESET_vect": 0, "PCINT0_vect": 2, "main": 8, "main_loop": 9,
            "led1_toggle": 10, "led1_off": 13, "led1_on": 19, "setup": 25,
            "ISR_PCINT0": 35, "ISR_PCINT0_end": 39,
        }
        # JMP main
        assert words[0] == 0x160800
        # LDI XL, LOW(1000) / LDI XH, HIGH(1000)
        assert words[32] == 0x011CE8
        assert words[33] == 0x011D03

    def test_load_from_tmp_path(self, tmp_path):
        source = tmp_path / "tiny.asm"
        source.write_text("start: NOP\n       JMP start\n", encoding="utf-8")
        symbols, words = AssemblyLoader().load_assembly(str(source))
        assert symbols == {"start": 0}
        assert words == [0x000000, 0x160000]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AssemblyLoader().load_assembly(str(tmp_path / "missing.asm"))

def test_regions_from_symbols():
    regions = regions_from_symbols({"main": 8, "RESET_vect": 0, "main_loop": 9, "alias": 8})
    assert regions == [
        SubroutineRegion(0, "RESET_vect"),
        SubroutineRegion(8, "main"),
        SubroutineRegion(9, "main_loop"),
    ]
