"""
HTTP client for the CJ Dropshipping API.

Every response uses the envelope {code, result, message, data}. The client
unwraps it, keeps a cached access token, spaces requests out to respect the
supplier's per-second limit and backs off when the limit is hit anyway.
"""
import hashlib
import hmac
import json
import logging
import re
import threading
import time
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx
from django.conf import settings
from django.core.cache import cache
from django.utils.dateparse import parse_datetime

from .dtos import (
    FreightOptionDTO, SupplierOrderDTO, SupplierOrderDetailDTO, SupplierProductDTO,
    SupplierProductPageDTO, SupplierProductSummaryDTO, SupplierStatusDTO,
    SupplierVariantDTO, WarehouseStockDTO,
)
from .exceptions import (
    SupplierAuthError, SupplierError, SupplierRateLimitError, SupplierUnavailable,
)

logger = logging.getLogger(__name__)

TOKEN_CACHE_KEY = 'supplier:access_token'
TOKEN_REFRESH_LOCK_KEY = 'supplier:token_refresh_lock'
TOKEN_REFRESH_INTERVAL = 300  # seconds between token requests
DEFAULT_TOKEN_TTL = 14 * 24 * 3600

RATE_LIMIT_CODE = 1600200
INVALID_TOKEN_CODE = 1600001

_PRICE_RE = re.compile(r'\d+(?:\.\d+)?')


def _parse_price(value) -> Decimal:
    """Supplier prices come as numbers, strings or ranges like "2.10 -- 4.50"."""
    if value is None:
        return Decimal('0')
    match = _PRICE_RE.search(str(value))
    if not match:
        return Decimal('0')
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return Decimal('0')


def _parse_int(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _first_image(value) -> str:
    """productImage is a URL, a list, or a JSON-encoded list of URLs."""
    if not value:
        return ''
    if isinstance(value, list):
        return str(value[0]) if value else ''
    text = str(value).strip()
    if text.startswith('['):
        try:
            images = json.loads(text)
        except ValueError:
            return ''
        return str(images[0]) if images else ''
    return text


class SupplierClient:
    """
    CJ Dropshipping API client.

    One instance is shared per process (see get_client). Requests from all
    threads go through a single lock so the minimum interval between calls
    holds process-wide.
    """

    _throttle_lock = threading.Lock()

    def __init__(
        self,
        base_url: Optional[str] = None,
        email: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        min_interval: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_base: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep=time.sleep,
    ):
        self.base_url = (base_url or settings.CJ_API_BASE_URL).rstrip('/')
        self.email = settings.CJ_EMAIL if email is None else email
        self.api_key = settings.CJ_API_KEY if api_key is None else api_key
        self.static_token = settings.CJ_ACCESS_TOKEN if access_token is None else access_token
        self.webhook_secret = settings.CJ_WEBHOOK_SECRET if webhook_secret is None else webhook_secret
        self.min_interval = settings.CJ_MIN_REQUEST_INTERVAL if min_interval is None else min_interval
        self.max_retries = settings.CJ_MAX_RETRIES if max_retries is None else max_retries
        self.backoff_base = settings.CJ_BACKOFF_BASE if backoff_base is None else backoff_base
        self.timeout = settings.CJ_TIMEOUT if timeout is None else timeout

        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.Client] = None
        self._last_request_monotonic = 0.0

        self.request_count = 0
        self.rate_limit_hits = 0
        self.last_request_at: Optional[datetime] = None

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={'Content-Type': 'application/json'},
            )
        return self._client

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None

    def _throttle(self):
        with self._throttle_lock:
            wait = self.min_interval - (time.monotonic() - self._last_request_monotonic)
            if wait > 0:
                self._sleep(wait)
            self._last_request_monotonic = time.monotonic()

    def _send(self, method: str, path: str, params=None, payload=None, headers=None) -> httpx.Response:
        self._throttle()
        self.request_count += 1
        self.last_request_at = datetime.now(dt_timezone.utc)
        return self._get_client().request(method, path, params=params, json=payload, headers=headers)

    def _backoff_delay(self, attempt: int, retry_after: Optional[str] = None) -> float:
        delay = self.backoff_base * (2 ** attempt)
        if retry_after:
            try:
                delay = max(delay, float(retry_after))
            except ValueError:
                pass
        return delay

    @staticmethod
    def _decode(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            raise SupplierError(
                f"Supplier returned a non-JSON response (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        if not isinstance(body, dict):
            raise SupplierError("Supplier returned an unexpected payload", status_code=response.status_code)
        return body

    @classmethod
    def _try_decode(cls, response: httpx.Response) -> Dict[str, Any]:
        try:
            return cls._decode(response)
        except SupplierError:
            return {}

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def _drop_token(self):
        cache.delete(TOKEN_CACHE_KEY)

    def get_access_token(self, force_refresh: bool = False) -> str:
        """
        Return a usable access token, requesting one when needed.

        A new token is requested at most once per TOKEN_REFRESH_INTERVAL
        seconds across all processes sharing the cache.

        Raises:
            SupplierAuthError: no credentials, refresh throttled or rejected
        """
        if self.static_token:
            return self.static_token

        if not force_refresh:
            cached = cache.get(TOKEN_CACHE_KEY)
            if cached:
                return cached['token']

        if not self.email or not self.api_key:
            raise SupplierAuthError("Supplier credentials are not configured")

        if not cache.add(TOKEN_REFRESH_LOCK_KEY, time.time(), TOKEN_REFRESH_INTERVAL):
            raise SupplierAuthError(
                "Access token was requested less than 5 minutes ago; refresh throttled"
            )

        logger.info("Requesting new supplier access token")
        try:
            response = self._send(
                'POST', '/authentication/getAccessToken',
                payload={'email': self.email, 'apiKey': self.api_key},
            )
        except httpx.HTTPError as e:
            raise SupplierUnavailable(f"Token request failed: {e}")

        body = self._decode(response)
        data = body.get('data') or {}
        token = data.get('accessToken')
        if response.status_code >= 400 or body.get('result') is False or not token:
            raise SupplierAuthError(
                body.get('message') or "Access token request was rejected",
                code=body.get('code'),
                status_code=response.status_code,
            )

        expires_at = data.get('accessTokenExpiryDate')
        ttl = DEFAULT_TOKEN_TTL
        parsed = parse_datetime(expires_at) if expires_at else None
        if parsed is not None:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=dt_timezone.utc)
            # Renew a minute early
            ttl = max(60, int((parsed - datetime.now(dt_timezone.utc)).total_seconds()) - 60)

        cache.set(TOKEN_CACHE_KEY, {'token': token, 'expires_at': expires_at}, ttl)
        return token

    # -------------------------------------------------------------------------
    # Request loop
    # -------------------------------------------------------------------------

    def _request(self, method: str, path: str, params=None, payload=None) -> Any:
        """
        Perform an authenticated call and return the envelope's `data`.

        Rate limits and network failures are retried with exponential
        backoff. A rejected token is replaced once.
        """
        attempt = 0
        token_renewed = False
        force_refresh = False

        while True:
            headers = {'CJ-Access-Token': self.get_access_token(force_refresh=force_refresh)}
            force_refresh = False

            try:
                response = self._send(method, path, params=params, payload=payload, headers=headers)
            except httpx.HTTPError as e:
                if attempt < self.max_retries:
                    delay = self._backoff_delay(attempt)
                    logger.warning("Supplier %s %s failed (%s); retrying in %.1fs", method, path, e, delay)
                    self._sleep(delay)
                    attempt += 1
                    continue
                logger.error("Supplier %s %s unavailable: %s", method, path, e)
                raise SupplierUnavailable(f"Supplier API unreachable: {e}")

            if response.status_code >= 500:
                if attempt < self.max_retries:
                    self._sleep(self._backoff_delay(attempt))
                    attempt += 1
                    continue
                raise SupplierUnavailable(
                    f"Supplier API error (HTTP {response.status_code})",
                    status_code=response.status_code,
                )

            if response.status_code in (401, 429):
                body = self._try_decode(response)
            else:
                body = self._decode(response)
            code = body.get('code')

            if response.status_code == 429 or code == RATE_LIMIT_CODE:
                self.rate_limit_hits += 1
                if attempt < self.max_retries:
                    delay = self._backoff_delay(attempt, response.headers.get('Retry-After'))
                    logger.warning("Supplier rate limit hit on %s; backing off %.1fs", path, delay)
                    self._sleep(delay)
                    attempt += 1
                    continue
                raise SupplierRateLimitError(
                    "Supplier rate limit exceeded", code=code, status_code=response.status_code,
                )

            if response.status_code == 401 or code == INVALID_TOKEN_CODE:
                self._drop_token()
                if not token_renewed and not self.static_token:
                    token_renewed = True
                    force_refresh = True
                    continue
                raise SupplierAuthError(
                    body.get('message') or "Supplier rejected the access token",
                    code=code, status_code=response.status_code,
                )

            if response.status_code >= 400 or body.get('result') is False:
                raise SupplierError(
                    body.get('message') or f"Supplier request failed (HTTP {response.status_code})",
                    code=code, status_code=response.status_code,
                )

            return body.get('data')

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def search_products(self, keyword: str = '', page: int = 1, page_size: int = 20) -> SupplierProductPageDTO:
        params = {'pageNum': page, 'pageSize': page_size}
        if keyword:
            params['productNameEn'] = keyword
        data = self._request('GET', '/product/list', params=params) or {}

        products = [
            SupplierProductSummaryDTO(
                pid=str(item.get('pid', '')),
                name=item.get('productNameEn') or item.get('productName') or '',
                sku=item.get('productSku') or '',
                image=_first_image(item.get('productImage')),
                price=_parse_price(item.get('sellPrice')),
                category_name=item.get('categoryName') or '',
            )
            for item in data.get('list') or []
        ]
        return SupplierProductPageDTO(
            page=_parse_int(data.get('pageNum')) or page,
            page_size=_parse_int(data.get('pageSize')) or page_size,
            total=_parse_int(data.get('total')),
            products=products,
        )

    def get_product_details(self, pid: str) -> SupplierProductDTO:
        data = self._request('GET', '/product/query', params={'pid': pid})
        if not data:
            raise SupplierError(f"Product {pid} not found")

        variants = [
            SupplierVariantDTO(
                vid=str(v.get('vid', '')),
                name=v.get('variantNameEn') or v.get('variantName') or '',
                sku=v.get('variantSku') or '',
                price=_parse_price(v.get('variantSellPrice')),
            )
            for v in data.get('variants') or []
            if v.get('vid')
        ]
        return SupplierProductDTO(
            pid=str(data.get('pid') or pid),
            name=data.get('productNameEn') or data.get('productName') or '',
            sku=data.get('productSku') or '',
            price=_parse_price(data.get('sellPrice')),
            image=_first_image(data.get('productImage') or data.get('productImageSet')),
            category_name=data.get('categoryName') or '',
            description=data.get('description') or '',
            variants=variants,
        )

    def get_inventory(self, vid: str) -> List[WarehouseStockDTO]:
        data = self._request('GET', '/product/stock/queryByVid', params={'vid': vid}) or []
        return [
            WarehouseStockDTO(
                warehouse_id=str(row.get('areaId', '')),
                warehouse_name=row.get('areaEn') or '',
                country_code=row.get('countryCode') or '',
                total_inventory=_parse_int(row.get('totalInventoryNum')),
                cj_inventory=_parse_int(row.get('cjInventoryNum')),
                factory_inventory=_parse_int(row.get('factoryInventoryNum')),
            )
            for row in data
        ]

    # -------------------------------------------------------------------------
    # Logistics and orders
    # -------------------------------------------------------------------------

    def get_freight_quote(
        self,
        start_country: str,
        end_country: str,
        products: List[Dict[str, Any]],
        postal_code: Optional[str] = None,
    ) -> List[FreightOptionDTO]:
        """
        Quote freight for `products`, a list of {"vid", "quantity"}.
        Postage is returned in USD.
        """
        payload = {
            'startCountryCode': start_country,
            'endCountryCode': end_country,
            'products': [{'quantity': p['quantity'], 'vid': p['vid']} for p in products],
        }
        if postal_code:
            payload['zip'] = postal_code

        data = self._request('POST', '/logistic/freightCalculate', payload=payload) or []
        return [
            FreightOptionDTO(
                logistic_name=row.get('logisticName') or '',
                total_postage=_parse_price(row.get('logisticPrice')),
                aging=str(row.get('logisticAging') or ''),
            )
            for row in data
        ]

    def create_order(self, payload: Dict[str, Any]) -> SupplierOrderDTO:
        data = self._request('POST', '/shopping/order/createOrderV2', payload=payload) or {}
        return SupplierOrderDTO(
            order_id=str(data.get('orderId') or ''),
            order_number=str(data.get('orderNumber') or data.get('orderNum') or payload.get('orderNumber', '')),
            status=data.get('orderStatus') or 'CREATED',
        )

    def get_order_detail(self, order_id: str) -> SupplierOrderDetailDTO:
        data = self._request('GET', '/shopping/order/getOrderDetail', params={'orderId': order_id})
        if not data:
            raise SupplierError(f"Supplier order {order_id} not found")
        return SupplierOrderDetailDTO(
            order_id=str(data.get('orderId') or order_id),
            order_number=str(data.get('orderNum') or ''),
            status=data.get('orderStatus') or '',
            tracking_number=data.get('trackNumber') or '',
            logistic_name=data.get('logisticName') or '',
        )

    # -------------------------------------------------------------------------
    # Webhooks and status
    # -------------------------------------------------------------------------

    def verify_webhook(self, signature: Optional[str], timestamp: Optional[str], raw_body: bytes) -> bool:
        """HMAC-SHA256 of `timestamp + "." + body` with the webhook secret."""
        if not self.webhook_secret:
            logger.warning("CJ_WEBHOOK_SECRET not set; accepting unsigned webhook")
            return True
        if not signature or not timestamp:
            return False

        message = f"{timestamp}.".encode() + raw_body
        expected = hmac.new(self.webhook_secret.encode(), message, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature.strip().lower())

    def get_status(self) -> SupplierStatusDTO:
        cached = cache.get(TOKEN_CACHE_KEY)
        return SupplierStatusDTO(
            base_url=self.base_url,
            authenticated=bool(self.static_token or cached),
            uses_static_token=bool(self.static_token),
            token_expires_at=cached.get('expires_at') if cached else None,
            request_count=self.request_count,
            rate_limit_hits=self.rate_limit_hits,
            last_request_at=self.last_request_at,
        )


_client: Optional[SupplierClient] = None
_client_lock = threading.Lock()


def get_client() -> SupplierClient:
    """Process-wide client built from settings."""
    global _client
    with _client_lock:
        if _client is None:
            _client = SupplierClient()
        return _client


def reset_client():
    """Drop the shared client so the next get_client() re-reads settings."""
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
        _client = None
