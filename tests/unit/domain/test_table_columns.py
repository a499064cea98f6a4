"""Unit tests for the mapped column types"""

from sqlalchemy import DateTime
from sqlmodel import SQLModel

import src.domain  # noqa: F401  registers every table on the metadata
from src.domain.base import utcnow


def datetime_columns():
    return [
        column
        for table in SQLModel.metadata.tables.values()
        for column in table.columns
        if column.name.endswith("_at")
    ]


class TestDatetimeColumns:

    def test_every_timestamp_column_is_mapped(self):
        names = {f"{column.table.name}.{column.name}" for column in datetime_columns()}

        assert "ledger_entries.created_at" in names
        assert "webhook_events.processed_at" in names
        assert "campaign_leads.seen_at" in names

    def test_timestamp_columns_are_plain_naive_datetime(self):
        for column in datetime_columns():
            assert type(column.type) is DateTime, f"{column.table.name}.{column.name}"
            assert column.type.timezone is False

    def test_bind_accepts_naive_utcnow(self):
        value = utcnow()

        for column in datetime_columns():
            processor = column.type.bind_processor(None)
            bound = processor(value) if processor else value
            assert bound == value
