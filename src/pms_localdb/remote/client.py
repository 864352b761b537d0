from typing import Any, Dict, List, Tuple

import requests

from ..logging import get_logger


class RemoteDataError(Exception):
    """The hosted backend could not be reached or returned an error."""


class RemoteDataClient:
    """Thin client for the hosted backend's RPC endpoints.

    Only implements the two read-only calls used to refresh the local
    suggestion store: latest customer contacts, and the distinct
    descriptions/remarks seen on parcels.
    """

    CUSTOMER_CONTACTS_RPC = "get_latest_customer_contacts"
    VOCABULARIES_RPC = "get_unique_descriptions_and_remarks"

    def __init__(self, base_url: str, api_key: str, *, timeout: int = 30) -> None:
        self.base = base_url.rstrip("/")
        self.timeout = int(timeout)
        self.log = get_logger("remote-client")
        self.s = requests.Session()
        self.s.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

    # ---------- helpers ----------
    def _url(self, path: str) -> str:
        return f"{self.base}{path}"

    def _rpc(self, function: str) -> Any:
        url = self._url(f"/rest/v1/rpc/{function}")
        self.log.info(f"POST rpc {function}")
        try:
            r = self.s.post(url, json={}, timeout=self.timeout)
            r.raise_for_status()
            return r.json()
        except (requests.RequestException, ValueError) as e:
            self.log.error(f"RPC {function} failed: {e}")
            raise RemoteDataError(f"RPC {function} failed: {e}") from e

    # ---------- refresh sources ----------
    def fetch_customer_contacts(self) -> List[Dict[str, str]]:
        data = self._rpc(self.CUSTOMER_CONTACTS_RPC) or []
        if not isinstance(data, list):
            raise RemoteDataError(f"Unexpected {self.CUSTOMER_CONTACTS_RPC} payload: {type(data).__name__}")
        contacts: List[Dict[str, str]] = []
        for row in data:
            mobile = row.get("mobile_no") if isinstance(row, dict) else None
            if not mobile:
                self.log.warning(f"Skipping contact without mobile_no: {row!r}")
                continue
            contacts.append({"customer_name": str(row.get("customer_name") or ""), "mobile_no": str(mobile)})
        self.log.info(f"Fetched {len(contacts)} customer contact(s)")
        return contacts

    def fetch_descriptions_and_remarks(self) -> Tuple[List[str], List[str]]:
        data = self._rpc(self.VOCABULARIES_RPC) or {}
        if not isinstance(data, dict):
            raise RemoteDataError(f"Unexpected {self.VOCABULARIES_RPC} payload: {type(data).__name__}")
        descriptions = [str(d) for d in (data.get("descriptions") or []) if d is not None]
        remarks = [str(r) for r in (data.get("remarks") or []) if r is not None]
        self.log.info(f"Fetched {len(descriptions)} description(s) and {len(remarks)} remark(s)")
        return descriptions, remarks

    def close(self) -> None:
        self.s.close()
