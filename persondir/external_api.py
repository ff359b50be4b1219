"""Estimating age, gender and nationality from a first name."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ExternalAPIError(Exception):
    """An estimation service failed or gave incomplete data."""


@dataclass(frozen=True)
class NameMetrics:
    """Estimates derived from a name."""

    age: int
    gender: str
    nationality: str


def _fetch_json(client: httpx.Client, label: str, base_url: str, name: str) -> dict[str, Any]:
    try:
        response = client.get(base_url + name)
        payload = response.json()
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
        raise ExternalAPIError(f"error fetching {label} from {base_url}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ExternalAPIError(
            f"error fetching {label} from {base_url}: unexpected JSON {type(payload).__name__}"
        )
    return payload


class NameMetricsFetcher:
    """Queries the age, gender and nationality services concurrently."""

    def __init__(
        self,
        timeout: float = 5.0,
        age_url: str = "",
        gender_url: str = "",
        nationality_url: str = "",
    ) -> None:
        self.timeout = timeout
        self.age_url = age_url
        self.gender_url = gender_url
        self.nationality_url = nationality_url

    @classmethod
    def from_env(
        cls, timeout: float = 5.0, environ: Mapping[str, str] | None = None
    ) -> NameMetricsFetcher:
        """Read the service URLs from API_AGIFY, API_GENDERIZE and API_NATIONALIZE."""
        env = os.environ if environ is None else environ
        return cls(
            timeout=timeout,
            age_url=env.get("API_AGIFY", ""),
            gender_url=env.get("API_GENDERIZE", ""),
            nationality_url=env.get("API_NATIONALIZE", ""),
        )

    def _fetch_age(self, client: httpx.Client, name: str) -> float:
        payload = _fetch_json(client, "age", self.age_url, name)
        value = payload.get("age")
        if value is None:
            value = 0.0
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ExternalAPIError(f"error fetching age from {self.age_url}: bad age {value!r}")
        logger.debug("fetched age: %s", value)
        return float(value)

    def _fetch_gender(self, client: httpx.Client, name: str) -> str:
        payload = _fetch_json(client, "gender", self.gender_url, name)
        value = payload.get("gender") or ""
        if not isinstance(value, str):
            raise ExternalAPIError(
                f"error fetching gender from {self.gender_url}: bad gender {value!r}"
            )
        logger.debug("fetched gender: %s", value)
        return value

    def _fetch_nationality(self, client: httpx.Client, name: str) -> str:
        payload = _fetch_json(client, "nationality", self.nationality_url, name)
        countries = payload.get("country") or []
        if not isinstance(countries, list) or not all(isinstance(c, dict) for c in countries):
            raise ExternalAPIError(
                f"error fetching nationality from {self.nationality_url}: bad country list"
            )
        value = ""
        if countries:
            value = countries[0].get("country_id") or ""
            if not isinstance(value, str):
                raise ExternalAPIError(
                    f"error fetching nationality from {self.nationality_url}: bad country id"
                )
        logger.debug("fetched nationality: %s", value)
        return value

    def get_name_metrics(self, name: str) -> NameMetrics:
        """Return the estimates for ``name``; raise ExternalAPIError if any is missing."""
        with httpx.Client(timeout=self.timeout) as client, ThreadPoolExecutor(max_workers=3) as pool:
            age_future = pool.submit(self._fetch_age, client, name)
            gender_future = pool.submit(self._fetch_gender, client, name)
            nationality_future = pool.submit(self._fetch_nationality, client, name)
            age = age_future.result()
            gender = gender_future.result()
            nationality = nationality_future.result()

        if age == 0 or not gender or not nationality:
            raise ExternalAPIError(
                f"incomplete data from APIs: age={age:g}, "
                f"gender={json.dumps(gender)}, nationality={json.dumps(nationality)}"
            )
        return NameMetrics(age=int(age), gender=gender, nationality=nationality)