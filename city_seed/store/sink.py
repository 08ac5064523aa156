"""Entity sinks. The seeding loop hands each decoded entity to exactly one persist call."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from sqlalchemy import Table, create_engine, func, insert, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from city_seed.common.errors import PersistenceFailure
from city_seed.common.fs import ensure_dir
from city_seed.common.models import Entity, LocationRecord, OccupationRecord
from city_seed.store.tables import cities, metadata, occupations


class EntitySink(Protocol):
    def persist(self, entity: Entity) -> Entity:
        ...


def _table_for(entity: Entity) -> Table:
    if isinstance(entity, LocationRecord):
        return cities
    if isinstance(entity, OccupationRecord):
        return occupations
    raise TypeError(f"Unsupported entity type: {type(entity).__name__}")


class SqlAlchemySink:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SqlAlchemySink":
        try:
            url = make_url(database_url)
            if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
                ensure_dir(Path(url.database).parent)
            return cls(create_engine(url))
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Cannot open database {database_url}: {exc}") from exc

    def persist(self, entity: Entity) -> Entity:
        table = _table_for(entity)
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(table).values(**entity.to_dict()))
        except (SQLAlchemyError, OverflowError) as exc:
            raise PersistenceFailure(f"Insert into {table.name} failed: {exc}") from exc
        return entity

    def count(self, table: Table) -> int:
        with self.engine.connect() as conn:
            return int(conn.execute(select(func.count()).select_from(table)).scalar_one())

    def close(self) -> None:
        self.engine.dispose()


class MemorySink:
    def __init__(self) -> None:
        self.persisted: list[Entity] = []

    def persist(self, entity: Entity) -> Entity:
        _table_for(entity)
        self.persisted.append(entity)
        return entity

    @property
    def locations(self) -> list[LocationRecord]:
        return [e for e in self.persisted if isinstance(e, LocationRecord)]

    @property
    def occupations(self) -> list[OccupationRecord]:
        return [e for e in self.persisted if isinstance(e, OccupationRecord)]

    def close(self) -> None:
        return None
