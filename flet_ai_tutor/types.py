"""
Shared data types for the tutor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class AnnotationKind(Enum):
    """Visual kinds of overlay annotations."""

    HIGHLIGHT = "highlight"
    UNDERLINE = "underline"


class NotificationLevel(Enum):
    """Severity of a user-facing notification."""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


class OperationStatus(Enum):
    """Phase of an asynchronous store operation."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class SessionState(Enum):
    """Document session load state."""

    IDLE = "idle"
    LOADING = "loading"


# Type aliases for clarity
Point = Tuple[float, float]


@dataclass(frozen=True)
class SelectionRect:
    """Normalized rectangle in viewport coordinates."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_points(cls, start: Point, end: Point) -> "SelectionRect":
        return cls(
            x=min(start[0], end[0]),
            y=min(start[1], end[1]),
            width=abs(end[0] - start[0]),
            height=abs(end[1] - start[1]),
        )

    @property
    def is_degenerate(self) -> bool:
        """A zero-area drag is not an annotation candidate."""
        return self.width == 0 and self.height == 0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SelectionRect":
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass
class SelectionState:
    """Current drag selection state."""

    dragging: bool = False
    start: Optional[Point] = None
    end: Optional[Point] = None
    rect: Optional[SelectionRect] = None
    # Where the creation menu is shown, None while it is not armed
    menu_anchor: Optional[Point] = None

    @property
    def menu_open(self) -> bool:
        return self.menu_anchor is not None


@dataclass(frozen=True)
class AnnotationDraft:
    """An annotation that has not been assigned an id by the store yet."""

    document_id: str
    page_number: int
    kind: AnnotationKind
    color: str
    position: SelectionRect
    text_content: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        """Row inserted into the annotations table."""
        record: Dict[str, Any] = {
            "pdf_id": self.document_id,
            "page_number": self.page_number,
            "type": self.kind.value,
            "color": self.color,
            "position": self.position.to_dict(),
        }
        if self.text_content is not None:
            record["text_content"] = self.text_content
        return record


@dataclass(frozen=True)
class Annotation:
    """A persisted highlight/underline anchored to one page of one document."""

    id: str
    document_id: str
    page_number: int
    kind: AnnotationKind
    color: str
    position: SelectionRect
    text_content: Optional[str] = None

    @classmethod
    def from_draft(cls, annotation_id: str, draft: AnnotationDraft) -> "Annotation":
        return cls(
            id=annotation_id,
            document_id=draft.document_id,
            page_number=draft.page_number,
            kind=draft.kind,
            color=draft.color,
            position=draft.position,
            text_content=draft.text_content,
        )

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Annotation":
        return cls(
            id=str(record["id"]),
            document_id=str(record["pdf_id"]),
            page_number=int(record["page_number"]),
            kind=AnnotationKind(record["type"]),
            color=record["color"],
            position=SelectionRect.from_dict(record["position"]),
            text_content=record.get("text_content"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pdf_id": self.document_id,
            "page_number": self.page_number,
            "type": self.kind.value,
            "color": self.color,
            "position": self.position.to_dict(),
            "text_content": self.text_content,
        }


@dataclass(frozen=True)
class DocumentContext:
    """An already-resolved document: identity, location and page count."""

    document_id: str
    source: str
    page_count: int
    name: str = ""
    text_content: str = ""

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "DocumentContext":
        return cls(
            document_id=str(record["id"]),
            source=record.get("url") or "",
            page_count=int(record.get("page_count") or 0),
            name=record.get("name") or "",
            text_content=record.get("text_content") or "",
        )


@dataclass
class ChatMessage:
    """A single chat turn."""

    role: str  # "user" or "assistant"
    content: str
    id: Optional[str] = None

    def to_prompt(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class Notification:
    """A user-facing toast message."""

    level: NotificationLevel
    message: str


@dataclass
class Operation:
    """Two-phase record of a store operation.

    Starts as PENDING and moves to CONFIRMED or REJECTED exactly once.
    """

    action: str  # "load", "create" or "delete"
    generation: int = 0
    status: OperationStatus = OperationStatus.PENDING
    result: Any = None
    error: Optional[BaseException] = field(default=None, repr=False)

    def confirm(self, result: Any = None) -> "Operation":
        self.status = OperationStatus.CONFIRMED
        self.result = result
        return self

    def reject(self, error: Optional[BaseException] = None) -> "Operation":
        self.status = OperationStatus.REJECTED
        self.error = error
        return self

    @property
    def confirmed(self) -> bool:
        return self.status is OperationStatus.CONFIRMED
