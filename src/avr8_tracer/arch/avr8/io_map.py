# src/avr8_tracer/arch/avr8/io_map.py
"""
AVR8 周辺レジスタのアドレス配置、割り込みベクタ、レジスタ別名の定義。
"""
from typing import Optional

# @intent:constant I/Oポートのデータ方向/データ/ピン入力レジスタ（ベース領域でアクセス）。
DDRB = 0x00
PORTB = 0x01
PINB = 0x02

DDRC = 0x03
PORTC = 0x04
PINC = 0x05

DDRD = 0x06
PORTD = 0x07
PIND = 0x08

# @intent:constant ピン変化割り込みの制御/フラグ/マスクレジスタ。
# ファームウェアの慣例として拡張領域(+256)経由でアクセスします。
PCICR = 0x09
PCIFR = 0x0A

PCMSK0 = 0x10
PCMSK1 = 0x11
PCMSK2 = 0x12

PCIE0, PCIE1, PCIE2 = 0, 1, 2
PCIF0, PCIF1, PCIF2 = 0, 1, 2

# @intent:constant 割り込みベクタ（プログラムメモリ上の固定アドレス）。
RESET_VECT = 0x00
PCINT0_VECT = 0x02
PCINT1_VECT = 0x04
PCINT2_VECT = 0x06

# @intent:constant 汎用レジスタ数とポインタレジスタの別名 (X = R28:R29, Y = R30:R31)。
REGISTER_COUNT = 32
XL, XH = 28, 29
YL, YH = 30, 31
X, Y = XL, YL

# @intent:map アセンブラや構成ファイルから参照される周辺レジスタ名。
IO_REGISTERS = {
    "DDRB": DDRB, "PORTB": PORTB, "PINB": PINB,
    "DDRC": DDRC, "PORTC": PORTC, "PINC": PINC,
    "DDRD": DDRD, "PORTD": PORTD, "PIND": PIND,
    "PCICR": PCICR, "PCIFR": PCIFR,
    "PCMSK0": PCMSK0, "PCMSK1": PCMSK1, "PCMSK2": PCMSK2,
}

REGISTER_ALIASES = {"XL": XL, "XH": XH, "YL": YL, "YH": YH, "X": X, "Y": Y}

# @intent:utility_function レジスタ名 (R0-R31 または別名) を番号に変換します。不正な名前にはNoneを返します。
def register_index(name: str) -> Optional[int]:
    name = name.strip().upper()
    if name in REGISTER_ALIASES:
        return REGISTER_ALIASES[name]
    if name.startswith("R") and name[1:].isdigit() and int(name[1:]) < REGISTER_COUNT:
        return int(name[1:])
    return None
