"""Flat listing models matching the dashboard's REST wire format."""

from enum import Enum
from typing import Any, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from prime_estates.utils.errors import ValidationError


PLACEHOLDER_IMAGE_URL = "https://picsum.photos/seed/{flat_no}/600/400"

# Wire aliases the backend may use for the identity, in priority order
IDENTITY_ALIASES = ("_id", "id")


class FlatStatus(str, Enum):
    """Sale status of a flat."""
    AVAILABLE = "Available"
    SOLD = "Sold"

    def toggled(self) -> "FlatStatus":
        return FlatStatus.SOLD if self is FlatStatus.AVAILABLE else FlatStatus.AVAILABLE


class FlatDraft(BaseModel):
    """Client-supplied listing fields, before the backend assigns an identity."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    flat_no: str = Field(..., alias="flatNo", min_length=1, description="Flat/unit number, e.g. A-101")
    type: str = Field(..., min_length=1, description="Free-text category, e.g. 2BHK")
    price: float = Field(..., ge=0, allow_inf_nan=False, description="Asking price")
    status: FlatStatus = Field(default=FlatStatus.AVAILABLE, description="Available or Sold")
    image: str = Field(default="", description="Image URL (optional)")

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "FlatDraft":
        """
        Build a draft from raw form input.

        Accepts wire keys (flatNo) or field names (flat_no). Price arrives as
        text and is coerced to a number; blank or non-numeric prices and empty
        required fields raise ValidationError with one message per field.
        """
        data = dict(form)
        if data.get("image") is None:
            data.pop("image", None)
        if not data.get("status"):
            data.pop("status", None)
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise _to_validation_error(e) from e

    def to_payload(self) -> dict:
        """Serialize for a POST/PUT body (wire keys, no identity)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"listing_id"})


class Flat(FlatDraft):
    """Persisted flat listing with a canonical identity."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore", frozen=True)

    listing_id: str = Field(..., min_length=1, description="Backend-assigned identity")

    @model_validator(mode="before")
    @classmethod
    def _normalize_identity(cls, data: Any) -> Any:
        """Collapse the `_id` / `id` wire aliases into `listing_id`."""
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        aliased = [data.pop(alias, None) for alias in IDENTITY_ALIASES]
        if data.get("listing_id") is None:
            identity = next((value for value in aliased if value not in (None, "")), None)
            if identity is not None:
                data["listing_id"] = str(identity)
        return data

    @classmethod
    def from_draft(cls, draft: FlatDraft, listing_id: str) -> "Flat":
        return cls(listing_id=listing_id, **draft.model_dump())

    def draft(self) -> FlatDraft:
        """Return the non-identity fields as a draft."""
        return FlatDraft(**self.model_dump(exclude={"listing_id"}))

    def display_image(self) -> str:
        """Image URL for rendering, falling back to a seeded placeholder."""
        return self.image or PLACEHOLDER_IMAGE_URL.format(flat_no=self.flat_no)


def _to_validation_error(error: PydanticValidationError) -> ValidationError:
    """Flatten pydantic errors into field -> message pairs."""
    errors: dict[str, str] = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item.get("loc") else "__root__"
        errors.setdefault(field, item["msg"])
    fields = ", ".join(sorted(errors))
    return ValidationError(f"Invalid listing fields: {fields}", errors=errors)


def validate_draft(draft: Any) -> FlatDraft:
    """Coerce a draft or form mapping into a validated FlatDraft."""
    if isinstance(draft, Flat):
        return draft.draft()
    if isinstance(draft, FlatDraft):
        return draft
    if isinstance(draft, Mapping):
        return FlatDraft.from_form(draft)
    raise ValidationError(f"Unsupported draft type: {type(draft).__name__}")


def parse_flat(payload: Any) -> Optional[Flat]:
    """Parse one wire object into a Flat, or None if it is not listing-shaped."""
    try:
        return Flat.model_validate(payload)
    except PydanticValidationError:
        return None
