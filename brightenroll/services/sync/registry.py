"""
Registry of entity types copied between the local and cloud stores.

Each entry is described by a ``SyncTable`` which reads everything the upsert
routine needs (primary key, copyable columns, watermark columns) from the
ORM mapper, so string-keyed and integer-keyed tables share one code path.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Type

from sqlalchemy import Date, DateTime, inspect
from sqlalchemy.orm import ColumnProperty

from brightenroll.core.database import Base
from brightenroll.models import (
    User, UserStatusLog, Guardian, Student, StudentRequirement,
    EmployeeAddress, EmployeeEmergencyContact, SalaryInfo,
    GradeLevel, Fee, FeeBreakdown
)

# Column name fragments that mark a modification timestamp, most specific first
WATERMARK_MARKERS = ("lastmodified", "updated", "created")


@dataclass(frozen=True)
class SyncTable:
    """A single synced entity type."""

    model: Type[Base]
    name: str = field(default="")

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", self.model.__tablename__)

    @property
    def _mapper(self):
        return inspect(self.model)

    @property
    def primary_key(self) -> str:
        """Attribute name of the single-column primary key."""
        pk_columns = self._mapper.primary_key
        if len(pk_columns) != 1:
            raise ValueError(f"{self.name} must have exactly one primary key column")
        return self._mapper.get_property_by_column(pk_columns[0]).key

    @property
    def copied_attributes(self) -> Tuple[str, ...]:
        """Mapped column attributes written by sync; computed columns are excluded."""
        return tuple(
            prop.key
            for prop in self._mapper.column_attrs
            if isinstance(prop, ColumnProperty) and prop.columns[0].computed is None
        )

    @property
    def watermark_columns(self) -> List[Any]:
        """Date/time columns usable for incremental sync, in preference order."""
        found = {}
        for marker in WATERMARK_MARKERS:
            for prop in self._mapper.column_attrs:
                column = prop.columns[0]
                if not isinstance(column.type, (Date, DateTime)):
                    continue
                if marker in column.name.lower().replace("_", ""):
                    found.setdefault(column.name, column)
        return list(found.values())

    def identity(self, entity: Base) -> Any:
        return getattr(entity, self.primary_key)

    def values(self, entity: Base) -> Dict[str, Any]:
        return {attr: getattr(entity, attr) for attr in self.copied_attributes}

    def copy(self, entity: Base) -> Base:
        """Detached copy of ``entity`` that can be added to another session."""
        return self.model(**self.values(entity))

    def apply(self, target: Base, source: Base) -> None:
        """Overwrite every copied column of ``target`` with ``source`` values."""
        for attr, value in self.values(source).items():
            setattr(target, attr, value)


# Parents before children so destination foreign keys are always satisfied
SYNC_TABLES: List[SyncTable] = [
    SyncTable(User),
    SyncTable(Guardian),
    SyncTable(Student),
    SyncTable(StudentRequirement),
    SyncTable(EmployeeAddress),
    SyncTable(EmployeeEmergencyContact),
    SyncTable(SalaryInfo),
    SyncTable(GradeLevel),
    SyncTable(Fee),
    SyncTable(FeeBreakdown),
    SyncTable(UserStatusLog),
]

# A local store with no rows in any of these is treated as a fresh install
EMPTINESS_PROBE_MODELS: List[Type[Base]] = [User, Student, EmployeeAddress]
