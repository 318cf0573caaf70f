"""Value objects that describe an upload and the filing decision made for it."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UploadLocation = Literal[
    "plan_card", "consultant_card", "contractor_card", "document_card", "general"
]
CardType = Literal["CONSULTANT", "CONTRACTOR"]


class DocumentCategory(str, Enum):
    """Purpose of a document; selects the filing rule."""

    INVOICE = "invoice"
    SUBMISSION = "submission"
    TRR = "TRR"
    RFT = "RFT"
    ADDENDUM = "addendum"
    GENERAL = "general"


class ProcessingStatus(str, Enum):
    """States of the post-ingestion processing queue."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class FilingContext(BaseModel):
    """Where and how a file was uploaded.

    Accepts both snake_case and the camelCase keys posted by the web client.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    upload_location: UploadLocation = "general"
    card_type: Optional[CardType] = None
    discipline_or_trade: Optional[str] = None
    section_name: Optional[str] = None
    firm_name: Optional[str] = None
    add_to_documents: bool = True


class ManualOverride(BaseModel):
    """Caller-chosen folder and display name that bypass auto filing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    path: str
    display_name: str


class FilingMetadata(BaseModel):
    """Audit record stored on the document for every filing decision."""

    auto_filed: bool
    manually_overridden: bool
    original_file_name: str
    filing_context: Dict[str, Any] = Field(default_factory=dict)
    firm_id: Optional[str] = None
    category: Optional[str] = None


@dataclass
class IncomingFile:
    """One file of an upload batch, already read into memory.

    ``declared_size`` is set instead of ``content`` when the upload was
    already known to be over the size limit and its body was never read.
    """

    file_name: str
    content_type: str
    content: bytes
    override: Optional[ManualOverride] = None
    declared_size: Optional[int] = None

    @property
    def size(self) -> int:
        if self.declared_size is not None:
            return self.declared_size
        return len(self.content)


@dataclass(frozen=True)
class FilingResult:
    """Resolved folder path and display name for a document."""

    path: str
    display_name: str
    category: Optional[DocumentCategory] = None
    firm_id: Optional[str] = None


@dataclass(frozen=True)
class FilingPreview:
    """Advisory filing result computed without touching the database."""

    path: str
    display_name: str
    category: DocumentCategory


