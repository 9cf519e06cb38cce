"""
Column Matrix - which price lists are shown side by side for a selected list.

Keys are the code of the *selected* price list, values are the codes whose
prices appear as columns in the grid. The matrix is a frozen value passed to
the engine through Settings.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping


EXPORT_BASE_CODE = "01-EXP"
WEIGHT_CODE = "08-PDS"
INDUSTRIAL_CODE = "03-IND"
WHOLESALE_EXPORT_CODE = "04-GROS EXP"

DEFAULT_TABLE: dict[str, tuple[str, ...]] = {
    # Expert
    "01-EXP": ("01-EXP", "02-DET", "03-IND", "05-GROS", "08-PDS"),
    # Detaillant
    "02-DET": ("02-DET", "08-PDS"),
    # Industriel
    "03-IND": ("03-IND",),
    # Expert grossiste
    "04-GROS EXP": ("02-DET", "04-GROS EXP", "05-GROS", "06-IND HZ", "08-PDS"),
    # Industriel HZ
    "06-IND HZ": ("06-IND HZ",),
    # Detaillant HZ
    "07-DET HZ": ("07-DET HZ", "08-PDS"),
}


@dataclass(frozen=True)
class ColumnMatrix:
    """Static selected-code → column-codes table plus the designated codes."""
    table: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_TABLE))
    )
    export_base_code: str = EXPORT_BASE_CODE
    weight_code: str = WEIGHT_CODE
    industrial_code: str = INDUSTRIAL_CODE
    wholesale_export_code: str = WHOLESALE_EXPORT_CODE

    def __post_init__(self):
        # Freeze whatever mapping we were handed
        frozen = {str(k): tuple(str(c) for c in v) for k, v in self.table.items()}
        object.__setattr__(self, 'table', MappingProxyType(frozen))

    def resolve(self, selected_code: str) -> tuple[str, ...]:
        """
        Return the de-duplicated column codes for a selected price list code.

        Table entries keep their table order, followed by the export baseline
        and (unless the selection is the industrial list) the weight-based code.
        """
        codes = list(self.table.get(selected_code, (selected_code,)))
        codes.append(self.export_base_code)
        if selected_code != self.industrial_code:
            codes.append(self.weight_code)

        return tuple(dict.fromkeys(codes))

    @classmethod
    def from_json(cls, path: Path) -> 'ColumnMatrix':
        """
        Load a matrix from JSON.

        Expected shape::

            {"columns": {"01-EXP": ["01-EXP", "02-DET"]},
             "export_base_code": "01-EXP", "weight_code": "08-PDS",
             "industrial_code": "03-IND", "wholesale_export_code": "04-GROS EXP"}

        Missing keys keep their defaults.
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return cls(
            table=data.get('columns', DEFAULT_TABLE),
            export_base_code=data.get('export_base_code', EXPORT_BASE_CODE),
            weight_code=data.get('weight_code', WEIGHT_CODE),
            industrial_code=data.get('industrial_code', INDUSTRIAL_CODE),
            wholesale_export_code=data.get('wholesale_export_code', WHOLESALE_EXPORT_CODE),
        )
