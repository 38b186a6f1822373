import os
import yaml
from typing import Dict, Any
from .models import SystemConfig, ProgramSource, RegionConfig, CpuInitialState

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r', encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return self._parse_config(data, os.path.dirname(os.path.abspath(path)))

    def load_from_string(self, text: str, base_dir: str = ".") -> SystemConfig:
        return self._parse_config(yaml.safe_load(text), base_dir)

    def _parse_config(self, data: Any, base_dir: str) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping")

        arch = str(data.get("architecture", "AVR8")).upper()

        # Parse Program
        program_data = data.get("program", {}) or {}
        path = program_data.get("path")
        if path is not None and not os.path.isabs(path):
            path = os.path.join(base_dir, path)
        program = ProgramSource(path=path, listing=program_data.get("listing"))
        if program.path and program.listing:
            raise ValueError("Program must be given either as 'path' or 'listing', not both")

        # Parse Regions
        regions = []
        for region_data in data.get("regions", []) or []:
            name = region_data.get("name")
            if not name:
                raise ValueError(f"Region without name: {region_data}")
            regions.append(RegionConfig(start=self._parse_int(region_data.get("start")), name=name))

        # Parse Initial State
        initial_state_data = data.get("initial_state", {}) or {}
        registers = {
            str(name): self._parse_int(value)
            for name, value in (initial_state_data.get("registers", {}) or {}).items()
        }
        inputs = {
            name: self._parse_int(value)
            for name, value in (initial_state_data.get("inputs", {}) or {}).items()
        }
        initial_state = CpuInitialState(
            registers=registers,
            inputs=inputs,
            interrupts_enabled=bool(initial_state_data.get("interrupts_enabled", False)),
        )

        return SystemConfig(
            architecture=arch,
            program=program,
            regions=regions,
            initial_state=initial_state
        )

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            value = value.strip()
            if value.lower().startswith("0x"):
                return int(value, 16)
            if value.startswith("$"):
                return int(value[1:], 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")
