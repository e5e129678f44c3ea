"""Observable state of the listing store."""

from enum import Enum
from typing import Iterable, Optional
from pydantic import BaseModel, ConfigDict, Field

from prime_estates.models.listing import Flat, FlatStatus


class ConnectionMode(str, Enum):
    """Whether mutations go to the backend or stay local."""
    CONNECTED = "connected"
    DEGRADED = "degraded"


class StatusState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class StoreStatus(BaseModel):
    """Loading/error status of the last refresh."""
    model_config = ConfigDict(frozen=True)

    state: StatusState = Field(default=StatusState.IDLE)
    reason: Optional[str] = Field(None, description="Error reason, e.g. timeout or unreachable")
    message: Optional[str] = Field(None, description="User-facing error text")

    @classmethod
    def idle(cls) -> "StoreStatus":
        return cls(state=StatusState.IDLE)

    @classmethod
    def loading(cls) -> "StoreStatus":
        return cls(state=StatusState.LOADING)

    @classmethod
    def error(cls, reason: str, message: Optional[str] = None) -> "StoreStatus":
        return cls(state=StatusState.ERROR, reason=reason, message=message)

    @property
    def is_loading(self) -> bool:
        return self.state is StatusState.LOADING

    @property
    def is_error(self) -> bool:
        return self.state is StatusState.ERROR


class ListingStats(BaseModel):
    """Dashboard counters."""
    total: int = 0
    available: int = 0
    sold: int = 0

    @classmethod
    def from_listings(cls, listings: Iterable[Flat]) -> "ListingStats":
        stats = cls()
        for flat in listings:
            stats.total += 1
            if flat.status is FlatStatus.AVAILABLE:
                stats.available += 1
            else:
                stats.sold += 1
        return stats


class StoreSnapshot(BaseModel):
    """Immutable view of the store handed to subscribers."""
    model_config = ConfigDict(frozen=True)

    listings: tuple[Flat, ...] = ()
    mode: ConnectionMode = ConnectionMode.CONNECTED
    status: StoreStatus = Field(default_factory=StoreStatus.idle)

    @property
    def stats(self) -> ListingStats:
        return ListingStats.from_listings(self.listings)
