from enum import Enum


class ImageState(str, Enum):
    """Lifecycle of a single image attached to a draft listing."""

    LOCAL = "LOCAL"
    VALIDATED = "VALIDATED"
    REJECTED = "REJECTED"
    UPLOADED = "UPLOADED"

    @property
    def is_terminal(self) -> bool:
        return self in (ImageState.REJECTED, ImageState.UPLOADED)
