# avr8_tracer/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、FETCH -> DECODE -> EXECUTE の状態機械としてCPUを駆動する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import copy
import logging
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Tuple

from avr8_tracer.core.snapshot import Snapshot, Operation, Metadata
from avr8_tracer.core.state import CpuState, CpuPhase
from avr8_tracer.common.types import SymbolMap

logger = logging.getLogger(__name__)

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    状態機械の1遷移 (run_next_state) と、1命令分の実行 (step) を提供します。
    """
    # @intent:responsibility CPUの状態を初期化します。
    # @intent:pre-condition サブクラスは super().__init__() より前に、_create_initial_state が依存する属性を設定する必要があります。
    def __init__(self):
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0
        self._symbol_map: SymbolMap = {}
        self._reverse_symbol_map: Dict[int, str] = {}
        self._last_interrupt_vector: Optional[int] = None

    # @intent:responsibility シンボルマップを設定します。
    def set_symbol_map(self, symbol_map: SymbolMap) -> None:
        """
        シンボルマップ（名前とアドレスの対応表）を設定します。
        """
        self._symbol_map = symbol_map
        # 逆引きマップを作成して、アドレスからラベルを素早く引けるようにする
        self._reverse_symbol_map = {addr: name for name, addr in symbol_map.items()}

    def get_symbol_map(self) -> SymbolMap:
        return self._symbol_map

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。
    # @intent:rationale resetは_create_initial_stateを再呼び出しすることで、初期状態の生成ロジックを一元化します。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0
        self._last_interrupt_vector = None

    # @intent:responsibility 現在のCPUの状態を返します。
    def get_state(self) -> CpuState:
        return self._state

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    # @intent:responsibility FETCHフェーズ: 命令を読み出し、PCを進めます。
    @abstractmethod
    def _fetch(self) -> None:
        pass

    # @intent:responsibility DECODEフェーズ: 読み出した命令を型付きのOperationに変換します。
    @abstractmethod
    def _decode(self) -> None:
        pass

    # @intent:responsibility EXECUTEフェーズ: デコード済みの命令を実行します。
    @abstractmethod
    def _execute(self) -> None:
        pass

    # @intent:responsibility EXECUTE完了後に保留中の割り込みを検査します。デフォルトは何もしません。
    def _check_for_interrupt(self) -> None:
        """
        オーバーライドして割り込み受理を実装する。受理した場合は _last_interrupt_vector を設定する。
        """
        return None

    # @intent:responsibility 各クロックサイクル（状態遷移）の最後に呼ばれるフックです。デフォルトは何もしません。
    def _on_clock(self) -> None:
        return None

    # @intent:responsibility 状態機械を1遷移だけ進めます。
    # @intent:rationale 想定外のフェーズはウォッチドッグリセット相当として reset() で回復し、例外は送出しません。
    def run_next_state(self) -> None:
        phase = self._state.phase
        if phase == CpuPhase.FETCH:
            self._fetch()
            self._state.phase = CpuPhase.DECODE
        elif phase == CpuPhase.DECODE:
            self._decode()
            self._state.phase = CpuPhase.EXECUTE
        elif phase == CpuPhase.EXECUTE:
            self._execute()
            self._state.phase = CpuPhase.FETCH
            self._check_for_interrupt()
        else:
            logger.warning("Invalid phase %r, resetting", phase)
            self.reset()
        self._cycle_count += 1
        self._on_clock()

    # @intent:responsibility 直前にデコードされた（これから実行される）命令を返します。
    @abstractmethod
    def _current_operation(self) -> Optional[Operation]:
        pass

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale EXECUTE遷移が1回完了するまで状態機械を進めます。命令の途中から呼ばれた場合は、その命令を完了させます。
    def step(self) -> Snapshot:
        """
        FETCH + DECODE + EXECUTE を完了させ、その時点のCPU状態とメモリアクセスを含むSnapshotを返します。
        """
        self._clear_activity_log()
        self._last_interrupt_vector = None

        operation: Optional[Operation] = None
        address = self._state.pc
        while True:
            phase = self._state.phase
            if phase == CpuPhase.EXECUTE:
                operation = self._current_operation()
                address = self._current_address()
            self.run_next_state()
            if phase == CpuPhase.EXECUTE:
                break

        if operation is None:
            operation = Operation(opcode_hex="--", mnemonic="RESET")
        return self._create_snapshot(address, operation)

    # @intent:responsibility 実行中の命令のアドレスを返します。
    @abstractmethod
    def _current_address(self) -> int:
        pass

    # @intent:responsibility 前サイクルまでの残存アクセスログを破棄します。デフォルトは何もしません。
    def _clear_activity_log(self) -> None:
        return None

    # @intent:responsibility このサイクルで発生したメモリアクセスを取得します。デフォルトは空。
    def _drain_activity_log(self) -> list:
        return []

    # @intent:responsibility アドレスに対応するラベル（または領域名）を返します。
    def _describe_address(self, address: int) -> str:
        return self._reverse_symbol_map.get(address, "")

    # @intent:responsibility スナップショットを生成します。
    def _create_snapshot(self, address: int, operation: Operation) -> Snapshot:
        bus_activity = self._drain_activity_log()

        symbol_label = self._describe_address(address)
        symbol_info = f"{symbol_label}: " if symbol_label else ""
        symbol_info += f"{operation.mnemonic}"
        if operation.operands:
            symbol_info += " " + ", ".join(operation.operands)

        return Snapshot(
            # 後続の実行で変化しないよう、状態はディープコピーする
            state=copy.deepcopy(self._state),
            operation=operation,
            metadata=Metadata(
                cycle_count=self._cycle_count,
                symbol_info=symbol_info,
                interrupt_vector=self._last_interrupt_vector,
            ),
            bus_activity=bus_activity
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        デバッガがCPUの内部構造を知らなくても値を参照できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在のフラグ（ステータスレジスタ）の各ビットの状態を辞書形式で返す。
        """
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """
        指定されたプログラムメモリ範囲を逆アセンブルし、(address, hex, mnemonic) のタプルリストを返す。
        """
        pass
