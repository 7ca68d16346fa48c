import logging
from collections import namedtuple
from datetime import datetime, timezone

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from mgnrega_api.core.errors import RemoteUnavailable
from mgnrega_api.models.record import MgnregaRecord
from mgnrega_api.utils import (
    first_present,
    parse_district,
    parse_month,
    parse_numeric_or_default,
    parse_year,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10

# Field names seen across data.gov.in MGNREGA resources, preferred name first.
FIELD_ALIASES = {
    "district": ("district_name", "district"),
    "month": ("month",),
    "year": ("year", "fin_year"),
    "person_days": ("person_days", "persondays_generated", "Persondays_of_Central_Liability_so_far", "persondays"),
    "households": ("households", "total_households", "Total_Households_Worked", "total_households_worked"),
    "funds_spent": ("funds_spent", "total_expenditure", "Total_Exp", "Wages", "wages"),
    "works_completed": ("works_completed", "Number_of_Completed_Works"),
    "average_wage": ("average_wage", "Average_Wage_rate_per_day_per_person", "avg_wage"),
    "women_participation": ("women_participation", "Women_Persondays_Percentage"),
}


class RemoteCredentials(namedtuple("RemoteCredentials", ["endpoint", "api_key"])):
    __slots__ = ()

    @property
    def configured(self):
        return bool(self.endpoint) and bool(self.api_key)


def get_session_with_retries(total=0, backoff=1.0):
    s = requests.Session()
    retries = Retry(
        total=total,
        backoff_factor=backoff,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    s.mount("https://", HTTPAdapter(max_retries=retries))
    s.mount("http://", HTTPAdapter(max_retries=retries))
    return s


def fetch_remote(credentials, timeout=DEFAULT_TIMEOUT, session=None):
    """Fetch the first page of records from data.gov.in.

    Raises RemoteUnavailable for anything short of a non-empty record list.
    """
    if not credentials.configured:
        raise RemoteUnavailable("Missing API_KEY or DATASET_URL/RESOURCE_ID", "API")

    params = {
        "api-key": credentials.api_key,
        "format": "json",
    }
    headers = {"User-Agent": "MgnregaGoaDashboard/1.0", "Accept": "application/json"}

    session = session or get_session_with_retries()
    try:
        response = session.get(credentials.endpoint, headers=headers, params=params, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.Timeout as e:
        raise RemoteUnavailable(f"The request timed out after {timeout}s", "API") from e
    except requests.exceptions.HTTPError as e:
        if e.response is not None and e.response.status_code == 403:
            raise RemoteUnavailable("Access denied (403). Check your API key or dataset permissions.", "API") from e
        raise RemoteUnavailable(f"HTTP error occurred: {e}", "API") from e
    except requests.exceptions.RequestException as e:
        raise RemoteUnavailable(f"API request failed: {e}", "API") from e
    except ValueError as e:
        raise RemoteUnavailable(f"API returned invalid JSON: {e}", "API") from e

    records = data.get("records") if isinstance(data, dict) else None
    if not records:
        raise RemoteUnavailable("API returned no records", "API")

    logger.info("✅ Fetched %d records from API", len(records))
    return [r for r in records if isinstance(r, dict)]


def normalize_record(rec, fetched_at=None):
    def pick(name):
        return first_present(rec, *FIELD_ALIASES[name])

    return MgnregaRecord(
        district=parse_district(pick("district")),
        month=parse_month(pick("month")),
        year=parse_year(pick("year")),
        person_days=parse_numeric_or_default(pick("person_days"), 0, int),
        households=parse_numeric_or_default(pick("households"), 0, int),
        funds_spent=parse_numeric_or_default(pick("funds_spent"), 0.0),
        works_completed=parse_numeric_or_default(pick("works_completed"), 0, int),
        average_wage=parse_numeric_or_default(pick("average_wage"), 0.0),
        women_participation=parse_numeric_or_default(pick("women_participation"), 0.0),
        raw=dict(rec),
        fetched_at=fetched_at or datetime.now(timezone.utc),
    )


def normalize_records(records):
    fetched_at = datetime.now(timezone.utc)
    return [normalize_record(r, fetched_at) for r in records]
