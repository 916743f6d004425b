"""Models for caller-facing transform requests."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TransformRequest:
    """Unvalidated transform input as received from the kiosk."""

    image: object
    style_id: object
    event_id: object

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "TransformRequest":
        """Build a request from the JSON body of ``POST /transform``."""
        return cls(
            image=payload.get("image"),
            style_id=payload.get("styleId"),
            event_id=payload.get("eventId"),
        )


@dataclass(frozen=True)
class ValidatedTransform:
    """Transform input that passed validation."""

    image: str
    mime_type: str
    style_id: str
    prompt: str
    event_id: str
