"""Upsert atomico INSERT ... ON CONFLICT DO UPDATE (PostgreSQL e SQLite)."""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert(
    db: Session,
    model: type,
    values: dict[str, Any],
    conflict_columns: list[str],
    update_values: dict[str, Any] | None = None,
) -> None:
    """
    Una sola istruzione: il vincolo unique serializza scritture concorrenti
    sulla stessa chiave, niente find-then-create.
    update_values: valori extra solo per il ramo UPDATE (es. updated_at).
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Upsert non supportato per il dialect {dialect!r}")

    stmt = insert(model).values(**values)
    set_ = {
        col: getattr(stmt.excluded, col)
        for col in values
        if col not in conflict_columns
    }
    if update_values:
        set_.update(update_values)
    stmt = stmt.on_conflict_do_update(index_elements=conflict_columns, set_=set_)
    db.execute(stmt)
