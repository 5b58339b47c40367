"""
Job-market lookup against the Active Jobs DB API (RapidAPI).

The lookup never raises: when the key is missing, the API errors or times out,
the caller gets a degraded result carrying deterministic mock numbers instead.
"""
import os
import threading
import time
import logging
from typing import Any, Callable, Dict, List, Optional

import requests
from dotenv import load_dotenv

from data.market_data import get_mock_job_count

load_dotenv()

logger = logging.getLogger(__name__)

MAX_SAMPLE_JOBS = 5
MAX_CACHE_ENTRIES = 500


class JobSearchResult:
    """Outcome of a job search: ``ok`` with live data or ``degraded`` with mock data."""

    OK = 'ok'
    DEGRADED = 'degraded'

    def __init__(self, status, total_jobs, jobs, reason=None):
        self.status = status
        self.total_jobs = total_jobs
        self.jobs = jobs
        self.reason = reason

    @classmethod
    def ok(cls, total_jobs: int, jobs: List[Dict[str, Any]]):
        return cls(cls.OK, total_jobs, jobs)

    @classmethod
    def degraded(cls, role: str, reason: str):
        return cls(cls.DEGRADED, get_mock_job_count(role), [], reason=reason)

    @property
    def is_degraded(self) -> bool:
        return self.status == self.DEGRADED

    def to_dict(self, role: str) -> Dict[str, Any]:
        return {
            'role': role,
            'totalJobs': self.total_jobs,
            'jobs': self.jobs,
            'source': 'mock' if self.is_degraded else 'live',
        }


def normalize_job(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce an Active Jobs DB posting to the fields the dashboard shows."""
    locations = raw.get('locations_derived') or []
    return {
        'title': raw.get('title'),
        'company': raw.get('organization') or 'Unknown',
        'location': locations[0] if locations else 'Remote',
        'type': raw.get('employment_type') or 'Full-time',
        'applyLink': raw.get('url'),
        'postedAt': raw.get('date_posted'),
        'salary': None,
    }


class JobsService:
    def __init__(self, time_fn: Callable[[], float] = time.monotonic, session=None):
        self.api_host = os.getenv('JOBS_API_HOST', 'active-jobs-db.p.rapidapi.com')
        self.location = os.getenv('JOBS_LOCATION', 'United States')
        self.timeout = float(os.getenv('JOBS_TIMEOUT_SECONDS', '8'))
        self.cache_ttl = float(os.getenv('JOBS_CACHE_TTL_SECONDS', '3600'))
        self.cache_max_entries = MAX_CACHE_ENTRIES
        self._time = time_fn
        self._session = session or requests
        self._cache: Dict[str, Any] = {}
        self._cache_lock = threading.Lock()

    @property
    def api_key(self):
        """Get key dynamically from environment"""
        return os.getenv('RAPIDAPI_KEY', '')

    def _cache_get(self, key: str) -> Optional[JobSearchResult]:
        with self._cache_lock:
            entry = self._cache.get(key)
            if not entry:
                return None
            expires_at, value = entry
            if expires_at < self._time():
                del self._cache[key]
                return None
            return value

    def _cache_set(self, key: str, value: JobSearchResult):
        with self._cache_lock:
            now = self._time()
            for stale in [k for k, (expires_at, _) in self._cache.items() if expires_at < now]:
                del self._cache[stale]
            if key not in self._cache and len(self._cache) >= self.cache_max_entries:
                # Full of live entries: drop the one closest to expiry
                del self._cache[min(self._cache, key=lambda k: self._cache[k][0])]
            self._cache[key] = (now + self.cache_ttl, value)

    def search_jobs(self, role: str, location: Optional[str] = None) -> JobSearchResult:
        """
        Count open postings for a role and return a few samples.

        Args:
            role: Job title / career name (e.g. "Software Engineer")
            location: Optional location filter, defaults to JOBS_LOCATION

        Returns:
            JobSearchResult; degraded (with mock data) on any failure
        """
        if not self.api_key:
            logger.warning("RAPIDAPI_KEY not set - returning mock job data")
            return JobSearchResult.degraded(role, 'RAPIDAPI_KEY not set')

        location = location or self.location
        cache_key = f"{role.lower()}|{location.lower()}"
        cached = self._cache_get(cache_key)
        if cached is not None:
            return cached

        params = {
            'limit': '10',
            'offset': '0',
            'title_filter': f'"{role}"',
            'location_filter': f'"{location}"',
            'description_type': 'text',
        }
        headers = {
            'x-rapidapi-key': self.api_key,
            'x-rapidapi-host': self.api_host,
        }

        try:
            response = self._session.get(
                f"https://{self.api_host}/active-ats-7d",
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Active Jobs DB call failed: {e}")
            return JobSearchResult.degraded(role, f"request failed: {type(e).__name__}")

        if not response.ok:
            logger.error(f"Active Jobs DB error: {response.status_code} {response.text[:200]}")
            return JobSearchResult.degraded(role, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            logger.error("Active Jobs DB returned invalid JSON")
            return JobSearchResult.degraded(role, 'invalid JSON')

        if not isinstance(payload, list):
            payload = []

        result = JobSearchResult.ok(
            total_jobs=len(payload),
            jobs=[normalize_job(job) for job in payload[:MAX_SAMPLE_JOBS]],
        )
        self._cache_set(cache_key, result)
        return result


# Shared instance so the TTL cache survives across requests
jobs_service = JobsService()
