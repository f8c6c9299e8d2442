from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from . import canon, exceptions, ingest
from .types import BuildingRecord, EnergyFrame, PredictRequest, SuggestRequest

logger = logging.getLogger(__name__)


class BuildingDataClient:
    """
    Read-only client for the GreenPulse data API.

    Transport errors raise NetworkFailure, non-2xx responses its subclass
    HttpStatusError; bodies that
    are not JSON, or not the expected shape, raise InvalidResponse.
    """

    def __init__(
        self,
        base_url: str = canon.API_BASE_URL,
        *,
        timeout: float = canon.DEFAULT_TIMEOUT_S,
        tz: str = canon.DEFAULT_TZ,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.tz = tz
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None) -> "BuildingDataClient":
        return cls(
            config.api.base_url,
            timeout=config.api.timeout_s,
            tz=config.display.tz,
            session=session,
        )

    def _request(self, method: str, path: str, payload: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise exceptions.HttpStatusError(
                f"{method} {url} failed with HTTP {status}.", status_code=status
            ) from e
        except requests.RequestException as e:
            raise exceptions.NetworkFailure(
                f"Could not connect to the server at {self.base_url}: {e}"
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise exceptions.InvalidResponse(f"{method} {url} returned a non-JSON body.") from e

    def fetch_building_records(self, building_id: int) -> list[BuildingRecord]:
        body = self._request("GET", f"/building/{building_id}")
        if not isinstance(body, list):
            raise exceptions.InvalidResponse(
                f"Expected a list of records for building {building_id}, got {type(body).__name__}."
            )
        records = ingest.parse_records(body)
        logger.debug("Fetched %d records for building %s", len(records), building_id)
        return records

    def fetch_building_frame(self, building_id: int) -> EnergyFrame:
        return ingest.from_records(self.fetch_building_records(building_id), tz=self.tz)

    def predict_future_usage(self, request: PredictRequest) -> EnergyFrame:
        body = self._request(
            "POST", "/predict_future_usage", request.model_dump(exclude_none=True)
        )
        if not isinstance(body, list):
            raise exceptions.InvalidResponse("Prediction response must be a list of records.")
        return ingest.from_records(body, tz=self.tz)

    def suggest_param_adjustment(self, request: SuggestRequest) -> dict:
        body = self._request(
            "POST", "/suggest_param_adjustment", request.model_dump(exclude_none=True)
        )
        if not isinstance(body, dict):
            raise exceptions.InvalidResponse("Suggestion response must be an object.")
        return body

    def close(self) -> None:
        self._session.close()
