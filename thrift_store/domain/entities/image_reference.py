from dataclasses import dataclass, field
from urllib.parse import unquote, urlparse
from uuid import UUID, uuid4

from thrift_store.domain.enums.image_state import ImageState


class ImageReferenceError(Exception):
    """Raised when an image is moved through its lifecycle out of order."""


@dataclass
class ImageReference:
    """
    A single product photo attached to a draft listing.

    Starts LOCAL (bytes in memory), becomes VALIDATED once the AI check
    accepts it, and UPLOADED once a direct upload produced a public URL.
    """

    filename: str
    content_type: str
    data: bytes = field(default=b"", repr=False)
    id: UUID = field(default_factory=uuid4)
    state: ImageState = ImageState.LOCAL
    public_url: str | None = None

    # Set by the most recent submit-time validation, cleared on the next one
    rejection_message: str | None = None

    @classmethod
    def from_upload(cls, filename: str, content_type: str, data: bytes) -> "ImageReference":
        return cls(filename=filename, content_type=content_type, data=data)

    @classmethod
    def from_public_url(cls, url: str) -> "ImageReference":
        """Wrap an image that already lives in storage (editing an existing listing)."""
        name = unquote(urlparse(url).path.rsplit("/", 1)[-1]) or url
        return cls(
            filename=name,
            content_type="",
            state=ImageState.UPLOADED,
            public_url=url,
        )

    @property
    def needs_upload(self) -> bool:
        return self.state != ImageState.UPLOADED

    def mark_validated(self) -> None:
        if self.state == ImageState.VALIDATED:
            return
        if self.state != ImageState.LOCAL:
            raise ImageReferenceError(
                f"Cannot validate image {self.filename} in state {self.state.value}"
            )
        self.state = ImageState.VALIDATED

    def mark_rejected(self, message: str) -> None:
        if self.state != ImageState.LOCAL:
            raise ImageReferenceError(
                f"Cannot reject image {self.filename} in state {self.state.value}"
            )
        self.state = ImageState.REJECTED
        self.rejection_message = message

    def mark_uploaded(self, public_url: str) -> None:
        if self.state != ImageState.VALIDATED:
            raise ImageReferenceError(
                f"Image {self.filename} must be validated before upload "
                f"(state {self.state.value})"
            )
        self.state = ImageState.UPLOADED
        self.public_url = public_url
        self.rejection_message = None

    def attach_rejection(self, message: str) -> None:
        self.rejection_message = message

    def clear_rejection(self) -> None:
        self.rejection_message = None
