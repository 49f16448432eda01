"""
Normative Demand Standards
==========================

A standard maps the total number of residences in a network to a
per-residence diversified demand (kVA), one column per demand class.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..models import NormativeRow, NormativeTable

DEMAND_CLASSES = ("A", "B", "C", "D")


class DemandStandard:
    """
    Lookup wrapper around a NormativeTable.

    Rows are matched on min <= residences <= max. Counts above every row
    fall back to the last row, whose max acts as an open upper bound.
    """

    def __init__(self, table: NormativeTable):
        self.table = table

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def rows(self) -> List[NormativeRow]:
        return self.table.rows

    def row_for(self, residences: int) -> NormativeRow:
        for row in self.table.rows:
            if row.min <= residences <= row.max:
                return row
        return self.table.rows[-1]

    def factor(self, residences: int, demand_class: str) -> float:
        """
        Diversified kVA per residence.

        Args:
            residences: Total residences across the whole network
            demand_class: Class letter (A-D)

        Returns:
            Factor in kVA/residence; 0 when there are no residences
        """
        if demand_class not in DEMAND_CLASSES:
            raise ValueError(f"Unknown demand class: {demand_class}")
        if residences <= 0:
            return 0.0
        return self.row_for(residences).factor(demand_class)


def _rows(data: List[tuple]) -> List[NormativeRow]:
    return [NormativeRow(min=lo, max=hi, A=a, B=b, C=c, D=d) for lo, hi, a, b, c, d in data]


PRODIST = NormativeTable(
    name="PRODIST",
    rows=_rows([
        (1, 5, 1.50, 2.50, 4.00, 6.00),
        (6, 10, 1.20, 2.00, 3.20, 5.00),
        (11, 20, 1.00, 1.60, 2.60, 4.00),
        (21, 30, 0.90, 1.40, 2.20, 3.40),
        (31, 40, 0.85, 1.30, 2.00, 3.20),
        (41, 50, 0.80, 1.20, 1.90, 3.00),
        (51, 9999, 0.70, 1.10, 1.70, 2.80),
    ]),
)

ABNT = NormativeTable(
    name="ABNT",
    rows=_rows([
        (1, 10, 1.60, 2.70, 4.50, 7.00),
        (11, 20, 1.40, 2.30, 3.80, 6.00),
        (21, 30, 1.20, 2.00, 3.30, 5.20),
        (31, 50, 1.00, 1.80, 3.00, 4.80),
        (51, 9999, 0.90, 1.50, 2.50, 4.00),
    ]),
)

DEFAULT_STANDARD = "PRODIST"

BUILTIN_TABLES: Dict[str, NormativeTable] = {
    PRODIST.name: PRODIST,
    ABNT.name: ABNT,
}


def get_standard(name: str, tables: Optional[Dict[str, NormativeTable]] = None) -> DemandStandard:
    """
    Factory for the demand standard named in the scenario parameters.

    Args:
        name: Table name ('PRODIST', 'ABNT', or a caller-supplied table)
        tables: Optional caller tables; searched before the built-in ones

    Returns:
        DemandStandard; unknown names fall back to PRODIST
    """
    registry = dict(BUILTIN_TABLES)
    if tables:
        registry.update(tables)
    table = registry.get(name) or registry.get(DEFAULT_STANDARD) or BUILTIN_TABLES[DEFAULT_STANDARD]
    return DemandStandard(table)


def has_standard(name: str, tables: Optional[Dict[str, NormativeTable]] = None) -> bool:
    return name in BUILTIN_TABLES or bool(tables and name in tables)
