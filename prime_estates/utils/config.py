"""Backend API configuration read from the environment."""

import os
from typing import Optional


class ApiConfig:
    """Flats API settings. Read once at import; not mutable at runtime."""

    BASE_URL: str = os.environ.get("FLATS_API_BASE_URL", "http://localhost:5000/api")
    TIMEOUT_SECONDS: float = float(os.environ.get("FLATS_API_TIMEOUT_SECONDS", "15"))

    @classmethod
    def flats_url(cls, base_url: Optional[str] = None) -> str:
        """Return the `/flats` collection URL for a base URL."""
        return f"{(base_url or cls.BASE_URL).rstrip('/')}/flats"
