# backend/mgnrega_api/services/csv_loader.py
import logging
import os
import time
from collections import namedtuple

import pandas as pd

from mgnrega_api.core.errors import DataSourceError, FileNotFound
from mgnrega_api.models.record import MgnregaRecord
from mgnrega_api.utils import (
    parse_district,
    parse_month,
    parse_numeric_or_default,
    parse_year,
)

logger = logging.getLogger(__name__)

CSV_COLUMNS = (
    "district",
    "month",
    "year",
    "person_days",
    "households",
    "funds_spent",
    "works_completed",
    "average_wage",
    "women_participation",
)

DEFAULT_TTL_SECONDS = 300

_CacheSlot = namedtuple("_CacheSlot", ["records", "captured_at"])


def record_from_row(row):
    return MgnregaRecord(
        district=parse_district(row.get("district")),
        month=parse_month(row.get("month")),
        year=parse_year(row.get("year")),
        person_days=parse_numeric_or_default(row.get("person_days"), 0, int),
        households=parse_numeric_or_default(row.get("households"), 0, int),
        funds_spent=parse_numeric_or_default(row.get("funds_spent"), 0.0),
        works_completed=parse_numeric_or_default(row.get("works_completed"), 0, int),
        average_wage=parse_numeric_or_default(row.get("average_wage"), 0.0),
        women_participation=parse_numeric_or_default(row.get("women_participation"), 0.0),
    )


def load_csv(path):
    """Read and normalize every row of the MGNREGA CSV at ``path``."""
    if not path or not os.path.isfile(path):
        raise FileNotFound(f"CSV file not found at: {path}", "CSV")

    try:
        width = len(pd.read_csv(path, nrows=0).columns)

        def trim_extra_fields(fields):
            logger.warning("CSV %s has a row with %d fields, keeping the first %d", path, len(fields), width)
            return fields[:width]

        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            engine="python",
            on_bad_lines=trim_extra_fields,
        )
    except pd.errors.EmptyDataError:
        raise DataSourceError(f"CSV file is empty: {path}", "CSV")
    except (OSError, pd.errors.ParserError) as e:
        raise DataSourceError(f"CSV file could not be parsed: {e}", "CSV") from e

    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in CSV_COLUMNS if c not in df.columns]
    if missing:
        logger.warning("CSV %s is missing columns %s, defaulting them", path, missing)

    return [record_from_row(row) for row in df.to_dict(orient="records")]


class CsvCache:
    """Parsed CSV held in memory for a fixed freshness window.

    The slot is replaced as a whole on refresh, so concurrent readers see
    either the old or the new record tuple, never a mix.
    """

    def __init__(self, path, ttl_seconds=DEFAULT_TTL_SECONDS, clock=time.monotonic):
        self.path = path
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._slot = None

    def _fresh(self, slot):
        return slot is not None and self.clock() - slot.captured_at < self.ttl_seconds

    def is_fresh(self):
        return self._fresh(self._slot)

    def get(self):
        slot = self._slot
        if self._fresh(slot):
            logger.debug("CSV cache hit (%d records)", len(slot.records))
            return slot.records

        records = tuple(load_csv(self.path))
        self._slot = _CacheSlot(records, self.clock())
        logger.info("📄 Loaded %d records from CSV %s", len(records), self.path)
        return records

    def clear(self):
        self._slot = None
