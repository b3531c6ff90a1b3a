"""HTTP client for the garage backend (tips, weather, vehicle CRUD)."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from .exceptions import BackendError
from .fleet import Fleet
from .tips import merge_tips

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:3001"
DEFAULT_TIMEOUT = 20


class BackendClient:
    """Thin wrapper over the backend routes. Failures raise BackendError."""

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise BackendError(url, reason=str(e)) from e

    @staticmethod
    def _error_reason(r: requests.Response) -> Optional[str]:
        try:
            body = r.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            return body.get("error") or body.get("message")
        return None

    def _json(self, r: requests.Response) -> Any:
        if not r.ok:
            raise BackendError(r.url, r.status_code, self._error_reason(r))
        return r.json()

    # -------------------------------------------------------------------------
    # Tips
    # -------------------------------------------------------------------------

    def get_tips(self, kind: Optional[str] = None) -> List[Dict]:
        """General tips, or the tips for one kind (empty when none exist)."""
        path = f"/api/dicas-manutencao/{kind}" if kind else "/api/dicas-manutencao"
        r = self._request("GET", path)
        if kind and r.status_code == 404:
            logger.warning("No specific tips found for kind: %s", kind)
            return []
        return self._json(r)

    def get_tip_set(self, kind: str) -> Tuple[List[Dict], List[Dict]]:
        """
        Fetch general and kind tips concurrently and join them.

        If either request fails the whole call fails; no partial result.
        """
        with ThreadPoolExecutor(max_workers=2) as pool:
            general = pool.submit(self.get_tips)
            specific = pool.submit(self.get_tips, kind)
            return general.result(), specific.result()

    def load_tips_for_selection(self, fleet: Fleet) -> Optional[List[Dict]]:
        """
        Fetch tips for the selected vehicle.

        Returns None when nothing is selected or when the selection changed
        while the requests were in flight.
        """
        vehicle = fleet.selected
        if vehicle is None:
            return None
        token = fleet.selection_token()
        general, specific = self.get_tip_set(vehicle.kind.value)
        if not fleet.is_current(token):
            logger.info("Discarding tips for %s: selection changed", vehicle.model)
            return None
        return merge_tips(general, specific)

    # -------------------------------------------------------------------------
    # Weather
    # -------------------------------------------------------------------------

    def get_forecast(self, city: str) -> Dict[str, Any]:
        r = self._request("GET", f"/api/previsao/{quote(city)}")
        return self._json(r)

    # -------------------------------------------------------------------------
    # Vehicle documents
    # -------------------------------------------------------------------------

    def list_vehicles(self) -> List[Dict]:
        return self._json(self._request("GET", "/api/veiculos"))

    def create_vehicle(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._json(self._request("POST", "/api/veiculos", json=data))

    def update_vehicle(self, doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._json(self._request("PUT", f"/api/veiculos/{doc_id}", json=data))

    def delete_vehicle(self, doc_id: str) -> Dict[str, Any]:
        return self._json(self._request("DELETE", f"/api/veiculos/{doc_id}"))

    def db_status(self) -> Dict[str, Any]:
        """Store status; returned for both the 200 and 503 answers."""
        r = self._request("GET", "/api/db-status")
        if r.status_code in (200, 503):
            return r.json()
        return self._json(r)
