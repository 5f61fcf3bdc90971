"""Per-organization Shopify Admin API client.

Credentials come from ``ShopifySettings``; an organization without an
enabled store, domain and token has no client at all. Both GraphQL and
REST calls share one retry policy for throttling and transient 5xx.
"""

import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Callable

import requests
from django.conf import settings

from .models import ShopifySettings

logger = logging.getLogger("warehouse.shopify")

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})
MAX_RETRIES = 3
BASE_BACKOFF_SECONDS = 0.5


class ShopifyApiError(Exception):
    def __init__(self, message: str, status: int, organization_id=None, response_body: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.organization_id = organization_id
        self.response_body = response_body


@dataclass(frozen=True)
class ShopifyConfig:
    organization_id: int
    store_domain: str
    access_token: str
    api_version: str = ShopifySettings.DEFAULT_API_VERSION
    location_id: str = ""
    webhook_secret: str = ""
    default_warranty_months: int = 12


def get_org_shopify_config(organization_id) -> ShopifyConfig | None:
    """Return the organization's Shopify connection, or ``None`` when it is not usable."""
    if organization_id is None:
        return None
    row = ShopifySettings.objects.filter(organization_id=organization_id).first()
    if row is None or not row.enabled or not row.store_domain or not row.access_token:
        return None
    return ShopifyConfig(
        organization_id=row.organization_id,
        store_domain=row.store_domain,
        access_token=row.access_token,
        api_version=row.api_version or ShopifySettings.DEFAULT_API_VERSION,
        location_id=row.location_id,
        webhook_secret=row.webhook_secret,
        default_warranty_months=row.default_warranty_months,
    )


def extract_rest_error(payload: Any) -> str | None:
    """Pull a readable message out of a Shopify REST error body."""
    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors")
    if isinstance(errors, str):
        return errors
    if isinstance(errors, dict):
        parts = []
        for key, value in errors.items():
            if isinstance(value, (list, tuple)):
                value = ", ".join(str(v) for v in value)
            parts.append(f"{key}: {value}")
        return "; ".join(parts) or None
    if isinstance(payload.get("error"), str):
        return payload["error"]
    return None


class ShopifyClient:
    """Thin wrapper over ``requests`` bound to one store.

    ``sleep`` is injectable so the backoff can be observed in tests.
    """

    def __init__(
        self,
        config: ShopifyConfig,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        self.config = config
        self.session = session or requests.Session()
        self.sleep = sleep or time.sleep
        domain = re.sub(r"^https?://", "", config.store_domain).rstrip("/")
        self.api_base_url = f"https://{domain}/admin/api/{config.api_version}"
        self.graphql_url = f"{self.api_base_url}/graphql.json"

    @property
    def organization_id(self):
        return self.config.organization_id

    def _headers(self) -> dict:
        return {"Content-Type": "application/json", "X-Shopify-Access-Token": self.config.access_token}

    def _backoff(self, response, attempt: int) -> float:
        header = (response.headers.get("Retry-After") or "").strip()
        if header.isdigit():
            return float(header)
        return BASE_BACKOFF_SECONDS * attempt**2

    def _send(self, method: str, url: str, body: dict | None):
        attempt = 0
        while attempt < MAX_RETRIES:
            attempt += 1
            response = self.session.request(
                method,
                url,
                json=body,
                headers=self._headers(),
                timeout=settings.SHOPIFY_REQUEST_TIMEOUT,
            )
            if response.status_code in RETRYABLE_STATUSES and attempt < MAX_RETRIES:
                delay = self._backoff(response, attempt)
                logger.warning(
                    "shopify.retry",
                    extra={
                        "event": "shopify.retry",
                        "organization_id": self.organization_id,
                        "status": response.status_code,
                        "attempt": attempt,
                        "delay": delay,
                    },
                )
                self.sleep(delay)
                continue
            return response
        raise ShopifyApiError("Exceeded Shopify retry attempts", 500, self.organization_id)

    @staticmethod
    def _json(response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def graphql(self, query: str, variables: dict | None = None) -> dict:
        """Run a GraphQL operation and return its ``data`` block."""
        response = self._send("POST", self.graphql_url, {"query": query, "variables": variables or {}})
        payload = self._json(response)
        if not response.ok:
            raise ShopifyApiError(
                f"Shopify responded with status {response.status_code}",
                response.status_code,
                self.organization_id,
                payload,
            )
        payload = payload or {}
        if payload.get("errors"):
            message = "; ".join(
                str(err.get("message", err) if isinstance(err, dict) else err) for err in payload["errors"]
            )
            raise ShopifyApiError(message, response.status_code, self.organization_id, payload)
        if not payload.get("data"):
            raise ShopifyApiError(
                "Shopify response did not include data", response.status_code, self.organization_id, payload
            )
        return payload["data"]

    def rest(self, method: str, path: str, json: dict | None = None) -> Any:
        url = f"{self.api_base_url}/{path.lstrip('/')}"
        response = self._send(method.upper(), url, json)
        payload = self._json(response)
        if not response.ok:
            message = extract_rest_error(payload) or f"Shopify REST request failed with status {response.status_code}"
            raise ShopifyApiError(message, response.status_code, self.organization_id, payload)
        return payload


def to_gid(kind: str, value) -> str:
    return f"gid://shopify/{kind}/{value}"


def normalize_shopify_numeric_id(value) -> str:
    """``gid://shopify/InventoryItem/123`` and ``123`` both give ``"123"``."""
    text = str(value or "").strip()
    return text.rsplit("/", 1)[-1]
