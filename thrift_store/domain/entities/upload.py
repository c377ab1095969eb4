from dataclasses import dataclass, field


@dataclass(frozen=True)
class PresignedUploadTarget:
    """One-time upload authorization for a single file."""

    upload_url: str
    public_url: str


@dataclass(frozen=True)
class UploadFailure:
    filename: str
    reason: str


@dataclass(frozen=True)
class AllSucceeded:
    """Every file in the batch reached storage; urls follow input order."""

    public_urls: tuple[str, ...]


@dataclass(frozen=True)
class PartialFailure:
    """At least one file in the batch failed to upload."""

    succeeded: tuple[str, ...] = field(default_factory=tuple)
    failed: tuple[UploadFailure, ...] = field(default_factory=tuple)

    @property
    def failed_filenames(self) -> list[str]:
        return [failure.filename for failure in self.failed]


UploadOutcome = AllSucceeded | PartialFailure
