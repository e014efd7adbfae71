IMAGE_PREFIX = "image/"

# Served when a stored object carries no content type of its own
OCTET_STREAM = "application/octet-stream"


def is_image_mime_type(mime_type: str | None) -> bool:
    """Return True when the declared MIME type names an image."""
    return bool(mime_type) and mime_type.startswith(IMAGE_PREFIX)
