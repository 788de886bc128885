"""
HTTP client for looking products up in product-service.

Every response is classified into one ``LookupOutcome``. Only ``RETRYABLE``
(5xx or a transport failure) is retried, under the attempt/delay policy of the
injected ``ProductClientConfig``. Every other outcome resolves immediately.
When retries are exhausted the lookup resolves to ``None`` instead of raising.
"""

import time
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional

import httpx
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
    wait_incrementing,
)

from shared.core.jsonapi import JSONAPI_MEDIA_TYPE, DocumentIn
from shared.core.logging_config import get_logger

logger = get_logger(__name__)

API_KEY_HEADER = "X-API-KEY"


class ProductClientConfig(BaseModel):
    base_url: str
    api_key: str = ""
    timeout_ms: int = Field(default=5000, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=1000, ge=0)
    retry_delay_increment_ms: int = Field(default=0, ge=0)

    class Config:
        frozen = True


class RemoteProduct(BaseModel):
    id: int
    name: str
    price: Decimal


class RemoteProductAttributes(BaseModel):
    name: str
    price: Decimal


class LookupOutcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    CLIENT_ERROR = "client_error"
    RETRYABLE = "retryable"


def classify_status(status_code: int) -> LookupOutcome:
    if 200 <= status_code < 300:
        return LookupOutcome.FOUND
    if status_code == 404:
        return LookupOutcome.NOT_FOUND
    if status_code >= 500:
        return LookupOutcome.RETRYABLE
    return LookupOutcome.CLIENT_ERROR


class RetryableLookupError(Exception):
    """A lookup attempt failed in a way that is worth repeating."""


class ProductServiceClient:
    def __init__(
        self,
        config: ProductClientConfig,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self._sleep = sleep
        timeout_s = config.timeout_ms / 1000
        headers = {"Accept": JSONAPI_MEDIA_TYPE}
        if config.api_key:
            headers[API_KEY_HEADER] = config.api_key
        self._http = httpx.Client(
            base_url=config.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_s, connect=timeout_s),
            transport=transport,
        )

    def __enter__(self) -> "ProductServiceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _wait_strategy(self):
        delay = self.config.retry_delay_ms / 1000
        if self.config.retry_delay_increment_ms:
            return wait_incrementing(start=delay, increment=self.config.retry_delay_increment_ms / 1000)
        return wait_fixed(delay)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            f"Retrying product lookup (attempt {retry_state.attempt_number + 1}/{self.config.max_attempts}) "
            f"in {retry_state.next_action.sleep:.3f}s"
        )

    def fetch_product(self, product_id: int) -> Optional[RemoteProduct]:
        """Return the remote product, or ``None`` when it cannot be obtained."""
        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=self._wait_strategy(),
            retry=retry_if_exception_type(RetryableLookupError),
            before_sleep=self._log_retry,
            sleep=self._sleep,
        )
        try:
            for attempt in retrying:
                with attempt:
                    return self._attempt(product_id, attempt.retry_state.attempt_number)
        except RetryError as exc:
            logger.error(
                f"All {self.config.max_attempts} attempts to fetch product {product_id} failed; "
                f"last error: {exc.last_attempt.exception()}. Treating product as not found."
            )
        return None

    def _attempt(self, product_id: int, attempt_number: int) -> Optional[RemoteProduct]:
        prefix = f"Product lookup {product_id} attempt {attempt_number}/{self.config.max_attempts}"
        try:
            response = self._http.get(f"/{product_id}")
        except httpx.TransportError as exc:
            logger.warning(f"{prefix}: transport failure ({type(exc).__name__}: {exc})")
            raise RetryableLookupError(f"transport failure: {exc}") from exc

        outcome = classify_status(response.status_code)
        if outcome is LookupOutcome.RETRYABLE:
            logger.warning(f"{prefix}: server error HTTP {response.status_code}")
            raise RetryableLookupError(f"HTTP {response.status_code}")
        if outcome is LookupOutcome.NOT_FOUND:
            logger.warning(f"{prefix}: product not found (HTTP 404), not retrying")
            return None
        if outcome is LookupOutcome.CLIENT_ERROR:
            logger.error(f"{prefix}: client error HTTP {response.status_code}, not retrying")
            return None

        logger.info(f"{prefix}: found (HTTP {response.status_code})")
        return self._decode(product_id, response)

    def _decode(self, product_id: int, response: httpx.Response) -> Optional[RemoteProduct]:
        if not response.content.strip():
            logger.warning(f"Product service returned an empty body for product {product_id}")
            return None
        try:
            doc = DocumentIn[RemoteProductAttributes].model_validate_json(response.content)
            remote_id = int(doc.data.id) if doc.data.id else product_id
        except (PydanticValidationError, ValueError) as exc:
            logger.error(f"Could not decode product document for product {product_id}: {exc}")
            return None
        return RemoteProduct(id=remote_id, name=doc.data.attributes.name, price=doc.data.attributes.price)
