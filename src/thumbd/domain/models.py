"""Domain models for thumbnail jobs."""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple


STRATEGIES = ("bounded", "fill", "strict", "matted")


@dataclass(frozen=True)
class ThumbnailDescription:
    """One requested rendition of the original image."""

    suffix: str
    width: int
    height: int
    format: Optional[str] = None
    path: Optional[str] = None
    strategy: str = "bounded"
    quality: Optional[int] = None
    background: str = "black"

    def __post_init__(self):
        if not self.suffix and not self.path:
            raise ValueError("Description needs a suffix or an explicit path")
        if isinstance(self.width, bool) or not isinstance(self.width, int):
            raise ValueError(f"Width must be an integer, got: {self.width!r}")
        if isinstance(self.height, bool) or not isinstance(self.height, int):
            raise ValueError(f"Height must be an integer, got: {self.height!r}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Width and height must be positive")
        if self.strategy not in STRATEGIES:
            raise ValueError(f"Invalid strategy: {self.strategy}")
        if self.quality is not None and not 1 <= self.quality <= 100:
            raise ValueError(f"Quality must be within 1..100, got: {self.quality}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThumbnailDescription":
        """Build a description from its message representation."""
        if not isinstance(data, dict):
            raise ValueError(f"Description must be an object, got: {type(data).__name__}")
        try:
            width = data["width"]
            height = data["height"]
        except KeyError as e:
            raise ValueError(f"Description is missing {e.args[0]!r}") from e

        return cls(
            suffix=str(data.get("suffix") or ""),
            width=width,
            height=height,
            format=data.get("format") or None,
            path=data.get("path") or None,
            strategy=data.get("strategy") or "bounded",
            quality=data.get("quality"),
            background=data.get("background") or "black",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Message representation, omitting unset optional fields."""
        data: Dict[str, Any] = {
            "suffix": self.suffix,
            "width": self.width,
            "height": self.height,
        }
        if self.format:
            data["format"] = self.format
        if self.path:
            data["path"] = self.path
        if self.strategy != "bounded":
            data["strategy"] = self.strategy
        if self.quality is not None:
            data["quality"] = self.quality
        if self.background != "black":
            data["background"] = self.background
        return data


@dataclass(frozen=True)
class Job:
    """
    A thumbnailing job decoded from one queue message.

    `original` is a storage key (or http(s) URL) of the source image;
    `descriptions` keeps the order in which renditions were requested.
    """

    original: str
    descriptions: Tuple[ThumbnailDescription, ...] = ()

    def __post_init__(self):
        if not isinstance(self.original, str) or not self.original:
            raise ValueError("Job original must be a non-empty string")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        """Build a job from a decoded message body."""
        if not isinstance(data, dict):
            raise ValueError(f"Job must be an object, got: {type(data).__name__}")
        if "original" not in data:
            raise ValueError("Job is missing 'original'")

        raw_descriptions = data.get("descriptions", [])
        if not isinstance(raw_descriptions, list):
            raise ValueError("Job descriptions must be a list")

        return cls(
            original=data["original"],
            descriptions=tuple(ThumbnailDescription.from_dict(d) for d in raw_descriptions),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "descriptions": [d.to_dict() for d in self.descriptions],
        }


@dataclass(frozen=True)
class Message:
    """A queue message borrowed for the duration of one job."""

    handle: str
    body: bytes
    message_id: Optional[str] = None


@dataclass
class UploadResult:
    """Result of writing one file to storage."""

    success: bool
    bucket: str = ""
    key: str = ""
    size_bytes: int = 0
    content_type: Optional[str] = None
    error: Optional[str] = None


@dataclass
class RenditionResult:
    """Outcome of one rendition unit."""

    success: bool
    key: str
    stage: Optional[str] = None  # 'render' or 'upload' when failed
    error: Optional[str] = None


@dataclass
class JobResult:
    """Aggregate outcome of one job run."""

    success: bool
    original: str
    stage: Optional[str] = None  # 'download' when no renditions ran
    error: Optional[str] = None
    renditions: List[RenditionResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def failures(self) -> List[RenditionResult]:
        """Rendition units that did not succeed."""
        return [r for r in self.renditions if not r.success]

    @property
    def stored_keys(self) -> List[str]:
        return [r.key for r in self.renditions if r.success]

