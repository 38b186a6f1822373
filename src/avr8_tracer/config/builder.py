import logging
from typing import List, Tuple

from avr8_tracer.common.types import SymbolMap, SubroutineRegion
from avr8_tracer.arch.avr8.cpu import Avr8Cpu
from avr8_tracer.arch.avr8.io_map import IO_REGISTERS, register_index
from avr8_tracer.loader.loader import AssemblyLoader, regions_from_symbols
from .models import SystemConfig, CpuInitialState, ProgramSource

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、プログラムをアセンブルし、CPUを生成して初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Avr8Cpu:
        if config.architecture != "AVR8":
            raise ValueError(f"Unsupported architecture: {config.architecture}")

        symbol_map, words = self._load_program(config.program)

        if config.regions:
            regions = sorted(SubroutineRegion(region.start, region.name) for region in config.regions)
        else:
            regions = regions_from_symbols(symbol_map)

        cpu = Avr8Cpu(words, regions)
        cpu.set_symbol_map(symbol_map)

        # 初期状態の適用
        self.apply_initial_state(cpu, config.initial_state)

        return cpu

    def _load_program(self, program: ProgramSource) -> Tuple[SymbolMap, List[int]]:
        loader = AssemblyLoader()
        if program.path:
            return loader.load_assembly(program.path)
        if program.listing:
            return loader.assemble_lines(program.listing.splitlines())
        logger.debug("No program configured, program memory is filled with NOP")
        return {}, []

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    # @intent:rationale レジスタ名と入力ポート名はここで検証し、不正な名前は構成エラー(ValueError)として扱います。
    def apply_initial_state(self, cpu: Avr8Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        """
        cpu.reset()
        state = cpu.get_state()

        for reg_name, value in config_state.registers.items():
            index = register_index(reg_name)
            if index is None:
                raise ValueError(f"Unknown register in initial state: {reg_name}")
            state.registers[index] = value

        state.sr.i = config_state.interrupts_enabled

        for port, value in config_state.inputs.items():
            address = port if isinstance(port, int) else IO_REGISTERS.get(str(port).upper())
            if address is None:
                raise ValueError(f"Unknown input port in initial state: {port}")
            if not cpu.set_pin_input(address, value):
                raise ValueError(f"Input port address out of range: {port}")
