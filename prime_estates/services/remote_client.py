"""Async REST client for the flats backend."""

from typing import Any, Optional

import httpx

from prime_estates.models.listing import Flat, FlatDraft, parse_flat
from prime_estates.utils.config import ApiConfig
from prime_estates.utils.errors import (
    NetworkError,
    NotFoundError,
    ProtocolError,
    RemoteValidationError,
    ServerRejectedError,
)
from prime_estates.utils.logging import (
    get_structured_logger,
    get_correlation_id,
    log_timing,
    redact_url,
)
from prime_estates.utils.logging_config import LoggingConfig

logger = get_structured_logger(__name__)

# Status codes the backend uses to reject a listing payload
VALIDATION_STATUS_CODES = (400, 422)


class RemoteClient:
    """
    Typed transport for `{base_url}/flats`.

    Every call has a bounded timeout. Transport and HTTP failures are
    normalized into the package error taxonomy:
    timeouts -> NetworkError(reason="timeout"), refused/broken connections ->
    NetworkError(reason="unreachable"), 404 -> NotFoundError, 400/422 ->
    RemoteValidationError, other >= 400 -> ServerRejectedError, and bodies
    that are not listing-shaped -> ProtocolError.

    Use as an async context manager, or call `aclose()` when done.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.flats_url = ApiConfig.flats_url(base_url)
        self.timeout = timeout if timeout is not None else ApiConfig.TIMEOUT_SECONDS
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=transport,
            headers={"Accept": "application/json"},
        )
        logger.info(
            "RemoteClient initialized",
            flats_url=redact_url(self.flats_url),
            timeout_seconds=self.timeout
        )

    async def __aenter__(self) -> "RemoteClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Flats API operation error",
                error=str(exc_val),
                error_type=exc_type.__name__
            )
        await self.aclose()
        return False

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list(self) -> list[Flat]:
        """Fetch every listing."""
        body = await self._request("GET", self.flats_url)

        if not isinstance(body, list):
            # Tolerate odd backends rather than blanking the dashboard with a crash
            logger.warning(
                "Listing response was not an array; treating as empty",
                body_type=type(body).__name__
            )
            return []

        flats = []
        for index, item in enumerate(body):
            flat = parse_flat(item)
            if flat is None:
                raise ProtocolError(f"Listing at index {index} is malformed: {item!r}")
            flats.append(flat)

        logger.debug("Fetched listings", count=len(flats))
        return flats

    async def create(self, draft: FlatDraft) -> Flat:
        """Create a listing and return the backend-assigned record."""
        body = await self._request("POST", self.flats_url, payload=draft.to_payload())
        return self._expect_flat(body, "create")

    async def update(self, listing_id: str, fields: dict[str, Any]) -> Flat:
        """Send partial fields for a listing and return the updated record."""
        body = await self._request(
            "PUT",
            self._item_url(listing_id),
            payload=_jsonable(fields),
            listing_id=listing_id
        )
        return self._expect_flat(body, "update")

    async def remove(self, listing_id: str) -> None:
        """Delete a listing. Raises NotFoundError if it is already gone."""
        await self._request(
            "DELETE",
            self._item_url(listing_id),
            listing_id=listing_id,
            decode=False
        )

    def _item_url(self, listing_id: str) -> str:
        return f"{self.flats_url}/{listing_id}"

    @staticmethod
    def _expect_flat(body: Any, operation: str) -> Flat:
        flat = parse_flat(body)
        if flat is None:
            raise ProtocolError(f"Backend returned a malformed listing on {operation}: {body!r}")
        return flat

    async def _request(
        self,
        method: str,
        url: str,
        payload: Optional[dict] = None,
        listing_id: Optional[str] = None,
        decode: bool = True
    ) -> Any:
        """Issue one request and return the decoded JSON body (None if empty or not decoded)."""
        headers = {}
        correlation_id = get_correlation_id()
        if correlation_id:
            headers[LoggingConfig.LOG_CORRELATION_ID_HEADER] = correlation_id

        with log_timing(f"flats_api.{method.lower()}", logger=logger, url=redact_url(url)) as timing:
            try:
                response = await self._client.request(method, url, json=payload, headers=headers)
            except httpx.TimeoutException as e:
                raise NetworkError(
                    f"{method} {redact_url(url)} timed out after {self.timeout}s",
                    reason=NetworkError.TIMEOUT
                ) from e
            except httpx.RequestError as e:
                raise NetworkError(
                    f"Failed to reach {redact_url(url)}: {e}",
                    reason=NetworkError.UNREACHABLE
                ) from e
            timing["status_code"] = response.status_code

        if response.status_code == 404:
            raise NotFoundError(listing_id or "", f"Not found: {method} {redact_url(url)}")
        if response.status_code >= 400:
            detail = response.text[:500]
            logger.warning(
                "Flats API rejected request",
                method=method,
                status_code=response.status_code,
                detail=detail
            )
            if response.status_code in VALIDATION_STATUS_CODES:
                raise RemoteValidationError(response.status_code, detail)
            raise ServerRejectedError(response.status_code, detail)

        if not decode or not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise ProtocolError(f"Backend returned non-JSON body for {method} {redact_url(url)}") from e


def _jsonable(fields: dict[str, Any]) -> dict[str, Any]:
    """Unwrap enum values so partial updates serialize as plain JSON."""
    return {key: getattr(value, "value", value) for key, value in fields.items()}
