"""Relational tables for the seeded entities."""

from __future__ import annotations

from sqlalchemy import Column, Float, Integer, MetaData, String, Table

metadata = MetaData()

# No uniqueness constraints: every seeding run appends fresh rows.
cities = Table(
    "cities",
    metadata,
    Column("cityid", Integer, primary_key=True, autoincrement=True),
    Column("name", String),
    Column("state", String),
    Column("studio", Integer),
    Column("onebr", Integer),
    Column("twobr", Integer),
    Column("threebr", Integer),
    Column("fourbr", Integer),
    Column("walkscore", Float),
    Column("population", Integer),
    Column("occ_title", String),
    Column("hourly_wage", Float),
    Column("annual_wage", Integer),
    Column("climate_zone", String),
    Column("simple_climate", String),
)

occupations = Table(
    "occupations",
    metadata,
    Column("occid", Integer, primary_key=True, autoincrement=True),
    Column("occ_title", String),
    Column("hourly_wage", Float),
    Column("annual_wage", Integer),
    Column("jobs_1000", Float),
    Column("loc_quotient", Float),
)
