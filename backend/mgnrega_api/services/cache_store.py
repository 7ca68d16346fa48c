# backend/mgnrega_api/services/cache_store.py
import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from mgnrega_api.core.errors import PersistenceUnavailable
from mgnrega_api.models.dataset import DistrictData
from mgnrega_api.models.record import METRIC_FIELDS, MgnregaRecord
from mgnrega_api.utils import UNKNOWN_DISTRICT

logger = logging.getLogger(__name__)

MAX_RESULTS = 1000


def record_from_row(row):
    return MgnregaRecord(
        district=row.district,
        month=row.month,
        year=row.year,
        person_days=row.person_days or 0,
        households=row.households or 0,
        funds_spent=row.funds_spent or 0,
        works_completed=row.works_completed or 0,
        average_wage=row.average_wage or 0,
        women_participation=row.women_participation or 0,
        fetched_at=row.fetched_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


UPSERT_CHUNK = 500

# dialects with INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

UPDATED_COLUMNS = METRIC_FIELDS + ("raw", "fetched_at")


def _row_values(record, now):
    values = {name: getattr(record, name) for name in METRIC_FIELDS}
    values.update(
        district=record.district,
        month=record.month,
        year=record.year,
        raw=record.raw,
        fetched_at=record.fetched_at or now,
    )
    return values


class RecordStore:
    """Database cache of records keyed by (district, month, year).

    Writes raise PersistenceUnavailable; reads log and return nothing so the
    caller can move on to another source.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def upsert(self, record):
        return self.upsert_many([record])

    def upsert_many(self, records):
        """Insert or overwrite each record in one atomic statement per chunk.

        Duplicate keys within ``records`` collapse to the last one.
        """
        latest = {record.key: record for record in records}
        if not latest:
            return 0

        now = datetime.now(timezone.utc)
        values = [_row_values(r, now) for r in latest.values()]
        session = self.session_factory()
        try:
            dialect = session.get_bind().dialect.name
            insert = UPSERT_INSERTS.get(dialect)
            if insert is None:
                raise PersistenceUnavailable(f"upsert is not supported on {dialect}", "DB cache")

            for i in range(0, len(values), UPSERT_CHUNK):
                stmt = insert(DistrictData).values(values[i:i + UPSERT_CHUNK])
                updates = {name: stmt.excluded[name] for name in UPDATED_COLUMNS}
                updates["updated_at"] = func.now()
                session.execute(stmt.on_conflict_do_update(
                    index_elements=["district", "month", "year"],
                    set_=updates,
                ))
            session.commit()
            return len(values)
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceUnavailable(f"upsert failed: {e}", "DB cache") from e
        finally:
            session.close()

    def _read(self, operation, fn):
        session = self.session_factory()
        try:
            return fn(session)
        except SQLAlchemyError as e:
            logger.warning("⚠️ DB cache %s failed: %s", operation, e)
            return []
        finally:
            session.close()

    def query_all(self, limit=MAX_RESULTS):
        def run(session):
            rows = (
                session.query(DistrictData)
                .order_by(DistrictData.year.desc(), DistrictData.month.desc())
                .limit(min(limit, MAX_RESULTS))
                .all()
            )
            return [record_from_row(r) for r in rows]

        return self._read("query_all", run)

    def query_by_district(self, name, limit=MAX_RESULTS):
        needle = name.strip().lower()

        def run(session):
            rows = (
                session.query(DistrictData)
                .filter(func.lower(DistrictData.district).contains(needle, autoescape=True))
                .order_by(DistrictData.year.desc(), DistrictData.month.desc())
                .limit(min(limit, MAX_RESULTS))
                .all()
            )
            return [record_from_row(r) for r in rows]

        return self._read("query_by_district", run)

    def distinct_districts(self):
        def run(session):
            rows = (
                session.query(DistrictData.district)
                .filter(DistrictData.district != UNKNOWN_DISTRICT)
                .distinct()
                .order_by(DistrictData.district)
                .all()
            )
            return [r[0] for r in rows if r[0]]

        return self._read("distinct_districts", run)

    def count(self):
        session = self.session_factory()
        try:
            return session.query(DistrictData).count()
        except SQLAlchemyError as e:
            raise PersistenceUnavailable(f"count failed: {e}", "DB cache") from e
        finally:
            session.close()


def persist_best_effort(store, records):
    """Upsert ``records`` and discard any persistence failure."""
    if store is None or not records:
        return False
    try:
        written = store.upsert_many(records)
    except PersistenceUnavailable as e:
        logger.warning("⚠️ Failed to cache %d records: %s", len(records), e.message)
        return False
    logger.info("💾 Cached %d records to DB", written)
    return True
