from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, select

from city_seed.common.errors import PersistenceFailure
from city_seed.common.models import LocationRecord, OccupationRecord
from city_seed.store.sink import MemorySink, SqlAlchemySink
from city_seed.store.tables import cities, occupations


def _city(name: str = "A") -> LocationRecord:
    return LocationRecord(
        name=name,
        state="ST",
        studio=1,
        onebr=2,
        twobr=3,
        threebr=4,
        fourbr=5,
        walkscore=50.0,
        population=1000,
        occ_title="X",
        hourly_wage=10.0,
        annual_wage=20000,
        climate_zone="Z",
        simple_climate="temperate",
    )


def _occupation() -> OccupationRecord:
    return OccupationRecord(occ_title="Nurse", hourly_wage=40.0, annual_wage=83200, jobs_1000=12.5, loc_quotient=1.1)


def test_sqlalchemy_sink_inserts_rows():
    sink = SqlAlchemySink(create_engine("sqlite://"))
    assert sink.persist(_city()) == _city()
    sink.persist(_occupation())

    with sink.engine.connect() as conn:
        row = conn.execute(select(cities)).mappings().one()
    assert row["name"] == "A"
    assert row["fourbr"] == 5
    assert sink.count(occupations) == 1


def test_sqlalchemy_sink_appends_duplicates():
    sink = SqlAlchemySink(create_engine("sqlite://"))
    sink.persist(_city())
    sink.persist(_city())
    assert sink.count(cities) == 2


def test_sqlalchemy_sink_wraps_database_errors():
    sink = SqlAlchemySink(create_engine("sqlite://"))
    with sink.engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE occupations")

    with pytest.raises(PersistenceFailure):
        sink.persist(_occupation())


def test_from_url_creates_sqlite_parent_dir(tmp_path: Path):
    db_path = tmp_path / "nested" / "seed.db"
    sink = SqlAlchemySink.from_url(f"sqlite:///{db_path}")
    sink.persist(_city())
    sink.close()
    assert db_path.exists()


def test_from_url_rejects_bad_urls():
    with pytest.raises(PersistenceFailure):
        SqlAlchemySink.from_url("not-a-database-url")


def test_memory_sink_splits_entities():
    sink = MemorySink()
    sink.persist(_city())
    sink.persist(_occupation())
    assert sink.locations == [_city()]
    assert sink.occupations == [_occupation()]
    with pytest.raises(TypeError):
        sink.persist({"city": "A"})


def test_sqlalchemy_sink_wraps_driver_overflow():
    sink = SqlAlchemySink(create_engine("sqlite://"))
    oversized = LocationRecord(**dict(_city().to_dict(), population=10**30))

    with pytest.raises(PersistenceFailure):
        sink.persist(oversized)
    assert sink.count(cities) == 0
