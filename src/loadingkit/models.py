from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from loadingkit.settings.values import FORM_VALIDATION

_PLACEHOLDER_IMAGE = "https://via.placeholder.com/150"


class User(BaseModel):
    """Profile shown on the single-shot loading page."""

    id: str
    name: str
    email: str
    avatar: str = _PLACEHOLDER_IMAGE

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "User":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "Unknown User",
            email=data.get("email") or "no-email@example.com",
            avatar=data.get("avatar") or _PLACEHOLDER_IMAGE,
        )


class Product(BaseModel):
    """Catalogue entry listed by the background-loading search page."""

    id: str
    name: str
    description: str = "No description"
    price: float = Field(0.0, ge=0.0)
    image: str = _PLACEHOLDER_IMAGE
    category: Optional[str] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Product":
        # remote catalogues name the product "title"
        return cls(
            id=str(data["id"]),
            name=data.get("title") or data.get("name") or "Product",
            description=data.get("description") or "No description",
            price=float(data.get("price") or 0.0),
            image=data.get("image") or _PLACEHOLDER_IMAGE,
            category=data.get("category") or None,
        )

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name or description."""
        q = query.lower()
        return q in self.name.lower() or q in self.description.lower()


class ContactForm(BaseModel):
    """Contact form submitted under the action overlay."""

    name: str
    email: str
    message: str

    @field_validator("name")
    @classmethod
    def _chk_name(cls, v: str) -> str:
        if not v:
            raise ValueError(FORM_VALIDATION["name_required"])
        return v

    @field_validator("email")
    @classmethod
    def _chk_email(cls, v: str) -> str:
        if not v:
            raise ValueError(FORM_VALIDATION["email_required"])
        if "@" not in v:
            raise ValueError(FORM_VALIDATION["email_invalid"])
        return v

    @field_validator("message")
    @classmethod
    def _chk_message(cls, v: str) -> str:
        if not v:
            raise ValueError(FORM_VALIDATION["message_required"])
        return v

    @classmethod
    def validate_fields(cls, data: Mapping[str, Any]) -> Dict[str, str]:
        """Return ``{field: message}`` for every invalid field (empty if valid)."""
        payload = {k: data.get(k) or "" for k in ("name", "email", "message")}
        try:
            cls.model_validate(payload)
        except ValidationError as e:
            errors: Dict[str, str] = {}
            for err in e.errors():
                field = str(err["loc"][0]) if err["loc"] else "__root__"
                ctx_error = (err.get("ctx") or {}).get("error")
                errors[field] = str(ctx_error) if ctx_error else err["msg"]
            return errors
        return {}


__all__ = ["User", "Product", "ContactForm"]
