"""Input validation for transform requests."""

from collections.abc import Mapping

from photobooth.domain.errors import InvalidArgumentError
from photobooth.domain.transform import TransformRequest, ValidatedTransform

MAX_IMAGE_SIZE_BYTES = 9 * 1024 * 1024

ACCEPTED_IMAGE_PREFIXES: dict[str, str] = {
    "data:image/jpeg;base64,": "image/jpeg",
    "data:image/png;base64,": "image/png",
    "data:image/webp;base64,": "image/webp",
}


def validate_transform_request(
    request: TransformRequest, style_prompts: Mapping[str, str]
) -> ValidatedTransform:
    """Reject malformed requests before any external call is made."""
    image = _require_string(request.image, "image")
    mime_type = _detect_image_mime(image)
    if len(image) > MAX_IMAGE_SIZE_BYTES:
        raise InvalidArgumentError("Image too large. Maximum size is 9MB.")
    style_id = _require_string(request.style_id, "styleId")
    prompt = style_prompts.get(style_id)
    if prompt is None:
        raise InvalidArgumentError(f"Unknown style: {style_id}")
    event_id = _require_string(request.event_id, "eventId")
    return ValidatedTransform(
        image=image,
        mime_type=mime_type,
        style_id=style_id,
        prompt=prompt,
        event_id=event_id,
    )


def _require_string(value: object, field_name: str) -> str:
    if not value or not isinstance(value, str):
        raise InvalidArgumentError(f"{field_name} is required")
    return value


def _detect_image_mime(image: str) -> str:
    for prefix, mime_type in ACCEPTED_IMAGE_PREFIXES.items():
        if image.startswith(prefix):
            return mime_type
    raise InvalidArgumentError("Invalid image format. Must be JPEG, PNG, or WebP.")
