import base64

from .config import MAX_IMAGE_BYTES, MAX_IMAGE_MB
from .exceptions import ValidationError


NOT_AN_IMAGE = "Please ensure the file is an image format (JPG, PNG)."


def is_image_mime(mime_type: str) -> bool:
    return (mime_type or "").strip().lower().startswith("image/")


def check_image(mime_type: str, data: bytes) -> None:
    """
    Rejects anything the picker or a drop hands us that isn't a usable image.
    Raises ValidationError with a user-facing message.
    """
    if not is_image_mime(mime_type):
        raise ValidationError(NOT_AN_IMAGE)
    if not data:
        raise ValidationError("The selected image is empty.")
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationError(f"Please choose an image under {MAX_IMAGE_MB:g} MB.")


def to_data_uri(mime_type: str, data: bytes) -> str:
    """Encodes raw image bytes as a data: URI usable both for previews and model input."""
    enc = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type.strip().lower()};base64,{enc}"
