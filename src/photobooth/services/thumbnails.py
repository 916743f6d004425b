"""Thumbnail rendering with Pillow."""

from io import BytesIO

from PIL import Image, ImageOps

THUMBNAIL_SIZE = 400
THUMBNAIL_QUALITY = 80

# Failures Pillow raises for bytes it cannot turn into an image.
UNDECODABLE_IMAGE_ERRORS = (OSError, ValueError, Image.DecompressionBombError)


def make_thumbnail(
    image_bytes: bytes,
    size: int = THUMBNAIL_SIZE,
    quality: int = THUMBNAIL_QUALITY,
) -> bytes:
    """Center-crop and resize an image to a JPEG square.

    Raises one of ``UNDECODABLE_IMAGE_ERRORS`` for bytes that are not a usable
    image.
    """
    with Image.open(BytesIO(image_bytes)) as source:
        image = ImageOps.exif_transpose(source).convert("RGB")
    thumbnail = ImageOps.fit(image, (size, size), Image.Resampling.LANCZOS)
    output = BytesIO()
    thumbnail.save(output, format="JPEG", quality=quality)
    return output.getvalue()
