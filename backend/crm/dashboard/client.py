"""
HTTP client for the CRM API, used by the terminal dashboard.

Every call sends the internal bearer token and a timeout. Anything other
than a 2xx response carrying {"success": true, ...} is raised as ApiError,
including connection failures and timeouts.
"""
import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ApiClient:
    def __init__(self, base_url: str, token: str, timeout: float = DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        })

    def request(self, method: str, endpoint: str, params=None, payload=None) -> dict:
        """Issue one API call and return the envelope's `data`."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        logger.debug("API call: %s %s", method, url)
        try:
            response = self.session.request(
                method, url, params=params, json=payload, timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiError(f"{method} {endpoint} failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            message = body.get("message") if isinstance(body, dict) else None
            raise ApiError(
                message or f"HTTP error {response.status_code} for {method} {endpoint}",
                status_code=response.status_code,
            )
        if not isinstance(body, dict) or not body.get("success"):
            raise ApiError(
                (body.get("message") if isinstance(body, dict) else None)
                or f"Unexpected response for {method} {endpoint}",
                status_code=response.status_code,
            )
        return body.get("data") or {}

    def _get_field(self, method: str, endpoint: str, key: str, **kwargs):
        data = self.request(method, endpoint, **kwargs)
        if key not in data:
            raise ApiError(f"Response for {method} {endpoint} is missing \"{key}\"")
        return data[key]

    # ─── Endpoints ───────────────────────────────────────────────────────

    def current_user(self) -> dict:
        return self._get_field("GET", "/auth/me", "user")

    def dashboard_metrics(self) -> dict:
        return self._get_field("GET", "/internal/dashboard", "metrics")

    def list_leads(self, page: int = 1, limit: int = 10, **filters) -> dict:
        return self.request("GET", "/leads", params={"page": page, "limit": limit, **filters})

    def record_payment(self, lead_id, amount, payment_method: str = "bank_transfer", **extra) -> dict:
        payload = {"lead_id": str(lead_id), "amount": str(amount), "payment_method": payment_method}
        payload.update(extra)
        return self.request("POST", "/payments", payload=payload)

    def update_lead(self, lead_id, fields: dict) -> dict:
        return self._get_field("PUT", f"/leads/{lead_id}", "lead", payload=fields)
