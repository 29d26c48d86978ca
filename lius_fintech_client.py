"""Lius FinTech API client.

A thin wrapper around the HTTP JSON API served by
``lius_fintech_api``.  The client uses the ``requests`` library and
exposes one method per operation:

* :meth:`register` – create an account.
* :meth:`login` – check credentials and fetch the account summary.
* :meth:`get_balance` – current balance of an account.
* :meth:`transfer` – send money to another user.
* :meth:`list_transactions` – transaction history, newest first.
* :meth:`change_password` / :meth:`set_pin` – manage account secrets.

Every method returns a tuple ``(data, error)``.  On success ``data``
holds the parsed JSON body and ``error`` is ``None``.  On failure
``data`` is ``None`` and ``error`` is a dictionary with the keys
``status_code`` and ``message``.  Server errors carry the server's
message verbatim.  Connection problems and unreadable responses
(:class:`NetworkError`) are logged and reported with a generic retry
prompt and a ``status_code`` of ``None``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network error. Please try again."

Result = Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]


class NetworkError(Exception):
    """The API could not be reached or returned something unreadable."""


class LiusFintechAPI:
    """Client for the Lius FinTech HTTP API."""

    def __init__(
        self,
        *,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the API including the ``/api`` prefix,
                e.g. ``http://localhost:8000/api``.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helper
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, *, json_body: Any | None = None) -> Result:
        """Perform an HTTP request to the API.

        The API answers every failure with ``{"success": false,
        "message": ...}``; that message is passed through unchanged.
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(method=method, url=url, json=json_body, timeout=self.timeout)
            try:
                payload = response.json()
            except ValueError as exc:
                raise NetworkError(f"Unreadable response from {url}") from exc
            if not isinstance(payload, dict):
                raise NetworkError(f"Unexpected response from {url}")
        except (requests.RequestException, NetworkError) as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": NETWORK_ERROR_MESSAGE}

        if response.status_code < 400 and payload.get("success", True):
            return payload, None
        message = payload.get("message") or payload.get("detail") or f"HTTP {response.status_code}"
        logger.info("API request %s %s failed (%s): %s", method, path, response.status_code, message)
        return None, {"status_code": response.status_code, "message": message}

    # ------------------------------------------------------------------
    # Account operations
    # ------------------------------------------------------------------
    def register(self, username: str, password: str) -> Result:
        return self._request("POST", "/register", json_body={"username": username, "password": password})

    def login(self, username: str, password: str) -> Result:
        """Check credentials; ``data["user"]`` holds id, username and balance."""
        return self._request("POST", "/login", json_body={"username": username, "password": password})

    def get_balance(self, user_id: str) -> Result:
        return self._request("GET", f"/balance/{user_id}")

    def change_password(self, user_id: str, current_password: str, new_password: str) -> Result:
        return self._request(
            "POST",
            f"/users/{user_id}/password",
            json_body={"currentPassword": current_password, "newPassword": new_password},
        )

    def set_pin(self, user_id: str, password: str, pin: Optional[str]) -> Result:
        """Set the transfer PIN, or clear it with ``pin=None``."""
        return self._request("POST", f"/users/{user_id}/pin", json_body={"password": password, "pin": pin})

    # ------------------------------------------------------------------
    # Transfers and history
    # ------------------------------------------------------------------
    def transfer(self, from_user_id: str, to_username: str, amount: float,
                 pin: Optional[str] = None) -> Result:
        body: Dict[str, Any] = {"fromUserId": from_user_id, "toUsername": to_username, "amount": amount}
        if pin:
            body["pin"] = pin
        return self._request("POST", "/transfer", json_body=body)

    def list_transactions(self, user_id: str) -> Result:
        return self._request("GET", f"/transactions/{user_id}")
