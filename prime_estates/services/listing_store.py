"""Listing store - canonical flat collection synchronized with the REST backend."""

import asyncio
from typing import Any, Callable, Iterable, Optional

from ulid import ULID

from prime_estates.models.listing import Flat, validate_draft
from prime_estates.models.store_state import (
    ConnectionMode,
    ListingStats,
    StoreSnapshot,
    StoreStatus,
)
from prime_estates.services.demo_seed import demo_flats
from prime_estates.services.remote_client import RemoteClient
from prime_estates.services.search_filter import filter_listings
from prime_estates.utils.errors import (
    MutationError,
    NetworkError,
    NotFoundError,
    PrimeEstatesError,
    ProtocolError,
    ServerRejectedError,
)
from prime_estates.utils.logging import (
    StructuredLogger,
    get_structured_logger,
    correlation_context,
    redact_url,
)

logger = get_structured_logger(__name__)

# Identities synthesized in degraded mode; never persisted
LOCAL_ID_PREFIX = "local-"

Listener = Callable[[StoreSnapshot], None]


def generate_local_id() -> str:
    """Generate a time-ordered identity for a listing that only lives locally."""
    return f"{LOCAL_ID_PREFIX}{ULID()}"


class ListingStore:
    """
    Single source of truth for the visible listing collection.

    In CONNECTED mode every mutation goes to the backend and is followed by a
    full refresh; the backend owns identities and ordering. In DEGRADED (demo)
    mode the local collection is authoritative and no transport calls are made.
    Degraded mode is only entered through `enter_degraded()`.

    Refreshes never raise: failures land in `status` and the previous
    collection is kept. Mutation transport failures raise MutationError and
    leave collection, mode and status untouched.
    """

    def __init__(self, client: RemoteClient, listings: Optional[Iterable[Flat]] = None):
        self.client = client
        self._listings: list[Flat] = list(listings or [])
        self._mode = ConnectionMode.CONNECTED
        self._status = StoreStatus.idle()
        self._listeners: list[Listener] = []
        self._refresh_task: Optional[asyncio.Task] = None
        self._refresh_reconnects = False
        self._mutation_lock = asyncio.Lock()

    @property
    def _log(self) -> StructuredLogger:
        return logger.bind(connection_mode=self._mode.value)

    @property
    def listings(self) -> list[Flat]:
        return list(self._listings)

    @property
    def mode(self) -> ConnectionMode:
        return self._mode

    @property
    def status(self) -> StoreStatus:
        return self._status

    @property
    def is_degraded(self) -> bool:
        return self._mode is ConnectionMode.DEGRADED

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(listings=tuple(self._listings), mode=self._mode, status=self._status)

    def visible(self, term: str = "") -> list[Flat]:
        """Listings narrowed by the search box term."""
        return filter_listings(self._listings, term)

    def stats(self) -> ListingStats:
        return ListingStats.from_listings(self._listings)

    def get(self, listing_id: str) -> Flat:
        flat = self._find(listing_id)
        if flat is None:
            raise NotFoundError(listing_id)
        return flat

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def refresh(self, force: bool = False) -> list[Flat]:
        """
        Re-fetch the canonical collection from the backend.

        In degraded mode this is a no-op unless `force` is set, in which case
        it re-attempts the backend and returns to connected mode on success.
        A refresh issued while another is in flight waits for that one
        instead of starting a second fetch.
        """
        if self.is_degraded and not force:
            self._log.debug("Skipping refresh in degraded mode")
            return self.listings

        while self._refresh_task is not None and not self._refresh_task.done():
            inflight = self._refresh_task
            if not self.is_degraded or self._refresh_reconnects:
                self._log.info("Refresh already in flight; coalescing")
                await asyncio.shield(inflight)
                return self.listings
            # A connected-mode fetch started before demo mode; its result is discarded
            self._log.info("Waiting for stale refresh before reconnect attempt")
            await asyncio.shield(inflight)

        await asyncio.shield(self._start_refresh())
        return self.listings

    def enter_degraded(self, seed: Optional[Iterable[Flat]] = None) -> None:
        """Switch to local-only demo mode, replacing the collection with `seed`."""
        self._listings = demo_flats() if seed is None else list(seed)
        self._mode = ConnectionMode.DEGRADED
        self._status = StoreStatus.idle()
        self._log.warning(
            "Entered degraded mode; changes will not reach the backend",
            listing_count=len(self._listings)
        )
        self._notify()

    async def create(self, draft: Any) -> Flat:
        """
        Add a listing from a FlatDraft or raw form mapping.

        Raises ValidationError before any transport call if required fields
        are missing or the price is not a non-negative number.
        """
        with correlation_context():
            validated = validate_draft(draft)

            async with self._mutation_lock:
                if self.is_degraded:
                    flat = Flat.from_draft(validated, generate_local_id())
                    self._listings = [*self._listings, flat]
                    self._log.info("Created local listing", listing_id=flat.listing_id, flat_no=flat.flat_no)
                    self._notify()
                    return flat

                try:
                    created = await self.client.create(validated)
                except PrimeEstatesError as e:
                    self._log.error("Failed to create listing", flat_no=validated.flat_no, error=str(e))
                    raise MutationError("adding flat", e) from e

                self._log.info("Created listing", listing_id=created.listing_id, flat_no=created.flat_no)
                await self._resync()
                return self._find(created.listing_id) or created

    async def update_status(self, listing_id: str) -> Flat:
        """Flip a listing between Available and Sold."""
        with correlation_context():
            async with self._mutation_lock:
                current = self.get(listing_id)
                new_status = current.status.toggled()

                if self.is_degraded:
                    updated = current.model_copy(update={"status": new_status})
                    self._listings = [
                        updated if flat.listing_id == listing_id else flat
                        for flat in self._listings
                    ]
                    self._log.info("Toggled local listing status", listing_id=listing_id, status=new_status.value)
                    self._notify()
                    return updated

                try:
                    updated = await self.client.update(listing_id, {"status": new_status})
                except NotFoundError:
                    raise
                except PrimeEstatesError as e:
                    self._log.error("Failed to update listing status", listing_id=listing_id, error=str(e))
                    raise MutationError("updating status", e) from e

                self._log.info("Toggled listing status", listing_id=listing_id, status=new_status.value)
                await self._resync()
                return self._find(listing_id) or updated

    async def remove(self, listing_id: str) -> None:
        """Delete a listing. A listing that is already gone is not an error."""
        with correlation_context():
            async with self._mutation_lock:
                if self.is_degraded:
                    if self._find(listing_id) is None:
                        self._log.warning("Listing already absent", listing_id=listing_id)
                        return
                    self._listings = [flat for flat in self._listings if flat.listing_id != listing_id]
                    self._log.info("Removed local listing", listing_id=listing_id)
                    self._notify()
                    return

                try:
                    await self.client.remove(listing_id)
                    self._log.info("Removed listing", listing_id=listing_id)
                except NotFoundError:
                    self._log.warning("Listing already removed on backend", listing_id=listing_id)
                except PrimeEstatesError as e:
                    self._log.error("Failed to remove listing", listing_id=listing_id, error=str(e))
                    raise MutationError("deleting flat", e) from e

                await self._resync()

    def _find(self, listing_id: str) -> Optional[Flat]:
        return next((flat for flat in self._listings if flat.listing_id == listing_id), None)

    def _start_refresh(self) -> asyncio.Task:
        self._refresh_reconnects = self.is_degraded
        self._refresh_task = asyncio.create_task(self._fetch(reconnect=self._refresh_reconnects))
        return self._refresh_task

    async def _resync(self) -> None:
        """Refresh after a mutation, never reusing a fetch that started before it."""
        if self.is_degraded:
            return

        stale = self._refresh_task
        if stale is not None and not stale.done():
            await asyncio.shield(stale)

        current = self._refresh_task
        if current is not stale and current is not None and not current.done():
            # Started after the mutation completed, so it already observes it
            await asyncio.shield(current)
            return

        await asyncio.shield(self._start_refresh())

    async def _fetch(self, reconnect: bool) -> None:
        with correlation_context():
            self._set_status(StoreStatus.loading())
            try:
                listings = await self.client.list()
            except PrimeEstatesError as e:
                if self.is_degraded and not reconnect:
                    self._set_status(StoreStatus.idle())
                    return
                reason = _failure_reason(e)
                self._log.warning(
                    "Refresh failed; keeping previous listings",
                    reason=reason,
                    error=str(e),
                    listing_count=len(self._listings)
                )
                self._set_status(StoreStatus.error(reason, _failure_message(e, self.client)))
                return

            if self.is_degraded and not reconnect:
                # Demo mode was entered while this fetch was running
                self._log.info("Discarding refresh result after switch to degraded mode")
                self._set_status(StoreStatus.idle())
                return

            self._listings = listings
            if reconnect:
                self._mode = ConnectionMode.CONNECTED
                self._log.info("Backend reachable again; left degraded mode")
            self._status = StoreStatus.idle()
            self._log.info("Refreshed listings", listing_count=len(listings))
            self._notify()

    def _set_status(self, status: StoreStatus) -> None:
        self._status = status
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                self._log.exception("Store listener failed", listener=repr(listener))


def _failure_reason(error: PrimeEstatesError) -> str:
    if isinstance(error, NetworkError):
        return error.reason
    if isinstance(error, ProtocolError):
        return "protocol"
    if isinstance(error, NotFoundError):
        return "not_found"
    if isinstance(error, ServerRejectedError):
        return "rejected"
    return "error"


def _failure_message(error: PrimeEstatesError, client: RemoteClient) -> str:
    if isinstance(error, NetworkError):
        return (
            "Failed to connect to backend server. "
            f"Make sure it's running at {redact_url(client.flats_url)}"
        )
    return str(error)
