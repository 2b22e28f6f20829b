from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import StructureScope
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json
from .calculator.structure_calculator import SalaryLineItem, SalaryStructure
from .model import DEDUCTION_FIELDS, EARNING_FIELDS
from .repository import SalaryStructureRepository

_COLUMNS = "structure_id, name, description, is_active, applicable_to, applicable_values, earnings, deductions"


def _line_items(raw: Any, allowed: dict[str, str]) -> dict[str, SalaryLineItem]:
    # Stored with camelCase keys, as entered in the admin UI.
    items = load_json(raw) or {}
    return {allowed[k]: SalaryLineItem.from_dict(v or {}) for k, v in items.items() if k in allowed}


class MySQLSalaryStructureRepository(SalaryStructureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, structure_id: int) -> Optional[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_structures WHERE structure_id=%s", (int(structure_id),))
            r = fetchone(cur)
            return self._to_structure(r) if r else None

    def list_active(self) -> Sequence[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_structures WHERE is_active=1 ORDER BY name ASC")
            return [self._to_structure(r) for r in fetchall(cur)]

    @staticmethod
    def _to_structure(r: dict[str, Any]) -> SalaryStructure:
        return SalaryStructure(
            structure_id=int(r["structure_id"]),
            name=r["name"],
            description=r.get("description"),
            is_active=bool(r.get("is_active", 1)),
            applicable_to=StructureScope(r.get("applicable_to") or StructureScope.ALL.value),
            applicable_values=tuple(load_json(r.get("applicable_values")) or ()),
            earnings=_line_items(r.get("earnings"), EARNING_FIELDS),
            deductions=_line_items(r.get("deductions"), DEDUCTION_FIELDS),
        )
