# backend/mgnrega_api/services/fallback.py
"""Source resolution for every dashboard query.

Each tier is tried in order (API, CSV, DB cache, generated) and the first one
that produces data answers the query. Tier errors are logged and treated as
"no data"; the generated tier always answers.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from mgnrega_api.core.errors import DataSourceError, MissingParameter
from mgnrega_api.models.record import MgnregaRecord, ResponseEnvelope
from mgnrega_api.services.cache_store import RecordStore, persist_best_effort
from mgnrega_api.services.csv_loader import CsvCache
from mgnrega_api.services.data_fetcher import (
    RemoteCredentials,
    fetch_remote,
    get_session_with_retries,
    normalize_records,
)
from mgnrega_api.services.generator import MockDataGenerator
from mgnrega_api.utils import UNKNOWN_DISTRICT, district_matches

logger = logging.getLogger(__name__)

QUERY_ALL = "all"
QUERY_DISTRICTS = "districts"
QUERY_DISTRICT = "district"

SOURCE_API = "API"
SOURCE_CSV = "CSV"
SOURCE_DB_CACHE = "DB cache"
SOURCE_GENERATED = "generated"

CACHE_NOTE = "Using cached data due to API and CSV unavailability"
GENERATED_NOTE = "Using generated data due to unavailability of real data"


@dataclass(frozen=True)
class Query:
    kind: str
    district: Optional[str] = None


@dataclass
class TierResult:
    source: str
    data: Optional[List[MgnregaRecord]] = None
    districts: Optional[List[str]] = None
    note: Optional[str] = None


def distinct_districts(records):
    seen = []
    for r in records:
        if r.district and r.district != UNKNOWN_DISTRICT and r.district not in seen:
            seen.append(r.district)
    return seen


class Tier:
    """One data source in the chain.

    Subclasses provide ``load_all``; district lookups default to filtering it.
    """

    source = None
    note = None

    def available(self):
        return True

    def load_all(self):
        raise NotImplementedError

    def load_district(self, name):
        return [r for r in self.load_all() if district_matches(r.district, name)]

    def load_districts(self):
        return distinct_districts(self.load_all())

    def attempt(self, query):
        if not self.available():
            logger.debug("Skipping %s tier, not configured", self.source)
            return None

        try:
            if query.kind == QUERY_DISTRICTS:
                names = [n for n in self.load_districts() if n and n != UNKNOWN_DISTRICT]
                if not names:
                    logger.info("%s tier had no districts", self.source)
                    return None
                return TierResult(self.source, districts=names, note=self.note)

            if query.kind == QUERY_DISTRICT:
                records = list(self.load_district(query.district))
            else:
                records = list(self.load_all())
        except DataSourceError as e:
            logger.warning("⚠️ %s tier failed for %s query: %s", self.source, query.kind, e.message)
            return None
        except Exception:
            logger.exception("%s tier raised unexpectedly for %s query", self.source, query.kind)
            return None

        if not records:
            logger.info("%s tier had no records for %s query", self.source, query.kind)
            return None
        return TierResult(self.source, data=records, note=self.note)


class RemoteTier(Tier):
    source = SOURCE_API

    def __init__(self, credentials, store=None, timeout=10, session=None):
        self.credentials = credentials
        self.store = store
        self.timeout = timeout
        self.session = session

    def available(self):
        return self.credentials.configured

    def load_all(self):
        records = normalize_records(fetch_remote(self.credentials, timeout=self.timeout, session=self.session))
        persist_best_effort(self.store, records)
        return records


class CsvTier(Tier):
    source = SOURCE_CSV

    def __init__(self, cache):
        self.cache = cache

    def load_all(self):
        return self.cache.get()


class CacheTier(Tier):
    source = SOURCE_DB_CACHE
    note = CACHE_NOTE

    def __init__(self, store):
        self.store = store

    def load_all(self):
        return self.store.query_all()

    def load_district(self, name):
        return self.store.query_by_district(name)

    def load_districts(self):
        return self.store.distinct_districts()


class GeneratedTier(Tier):
    source = SOURCE_GENERATED
    note = GENERATED_NOTE

    def __init__(self, generator=None):
        self.generator = generator or MockDataGenerator()

    def attempt(self, query):
        if query.kind == QUERY_DISTRICTS:
            return TierResult(self.source, districts=self.generator.default_districts(), note=self.note)
        if query.kind == QUERY_DISTRICT:
            data = self.generator.generate_for_district(query.district)
        else:
            data = self.generator.generate_all()
        return TierResult(self.source, data=data, note=self.note)


class FallbackOrchestrator:
    def __init__(self, tiers, csv_cache=None):
        self.tiers = list(tiers)
        self.csv_cache = csv_cache

    def resolve(self, query):
        for tier in self.tiers:
            result = tier.attempt(query)
            if result is not None:
                return result
        raise RuntimeError(f"No data source produced a result for {query.kind} query")

    def get_all_data(self):
        logger.info("📊 Fetching all MGNREGA data...")
        result = self.resolve(Query(QUERY_ALL))
        logger.info("✅ Served %d records from %s", len(result.data), result.source)
        return ResponseEnvelope(success=True, source=result.source, data=result.data, note=result.note)

    def get_districts(self):
        logger.info("📍 Fetching districts list...")
        result = self.resolve(Query(QUERY_DISTRICTS))
        logger.info("✅ Districts from %s: %s", result.source, ", ".join(result.districts))
        return ResponseEnvelope(success=True, source=result.source, districts=result.districts, note=result.note)

    def get_district_data(self, district):
        """Records whose district contains ``district``, matched case-insensitively.

        Matching ignores surrounding whitespace; generated fallback records carry
        ``district`` exactly as given.
        """
        if district is None or not district.strip():
            raise MissingParameter("district")

        logger.info("📊 Fetching data for district: %s", district)
        result = self.resolve(Query(QUERY_DISTRICT, district))
        logger.info("✅ Found %d records for %s from %s", len(result.data), district, result.source)
        return ResponseEnvelope(
            success=True,
            source=result.source,
            district=district,
            data=result.data,
            note=result.note,
        )

    def clear_cache(self):
        if self.csv_cache is not None:
            self.csv_cache.clear()
        logger.info("🧹 CSV cache cleared")
        return {
            "success": True,
            "message": "Cache cleared successfully",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def build_orchestrator(settings, session_factory=None, generator=None, http_session=None):
    """Wire the standard API -> CSV -> DB cache -> generated chain."""
    store = RecordStore(session_factory) if session_factory is not None else None
    csv_cache = CsvCache(settings.CSV_PATH, ttl_seconds=settings.CSV_CACHE_TTL)
    credentials = RemoteCredentials(settings.DATASET_URL, settings.API_KEY)
    if http_session is None and credentials.configured:
        http_session = get_session_with_retries(total=settings.REMOTE_RETRIES)

    tiers = [
        RemoteTier(credentials, store, timeout=settings.REMOTE_TIMEOUT, session=http_session),
        CsvTier(csv_cache),
    ]
    if store is not None:
        tiers.append(CacheTier(store))
    tiers.append(GeneratedTier(generator))
    return FallbackOrchestrator(tiers, csv_cache=csv_cache)
