"""Folder and display-name rules for each document category.

Every category has one ``FilingRule`` in ``FILING_RULES``. Live filing and
preview both go through the same rule; they differ only in where the firm
name and the sequence number come from.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from tender_filing.core.config import settings
from tender_filing.models.filing import (
    DocumentCategory,
    FilingContext,
    FilingPreview,
    FilingResult,
)
from tender_filing.repositories.document_repository import DocumentRepository
from tender_filing.services.filing.firm_registry import FirmRegistry
from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)

UNKNOWN_FIRM = "Unknown"
DEFAULT_DISCIPLINE = "General"
DEFAULT_EXTENSION = "PDF"


def file_extension(file_name: str) -> str:
    """Uppercased text after the last dot, or PDF when there is none."""
    if "." in file_name:
        return file_name.rsplit(".", 1)[1].upper()
    return DEFAULT_EXTENSION


def tender_folder(context: FilingContext) -> str:
    """``Consultants/<discipline>`` or ``Contractors/<trade>`` for tender documents."""
    discipline = context.discipline_or_trade or DEFAULT_DISCIPLINE
    if context.card_type == "CONTRACTOR":
        return f"Contractors/{discipline}"
    if context.card_type == "CONSULTANT":
        return f"Consultants/{discipline}"
    return f"Consultants/{DEFAULT_DISCIPLINE}"


def general_folder(context: FilingContext, file_name: str) -> str:
    misc = settings.filing.misc_folder
    lowered = file_name.lower()
    if "planning" in lowered or "plan" in lowered:
        return misc
    if "cost" in lowered:
        return misc
    if context.upload_location == "plan_card":
        return misc
    if context.upload_location == "consultant_card" and context.discipline_or_trade:
        return f"Consultants/{context.discipline_or_trade}"
    if context.upload_location == "contractor_card" and context.discipline_or_trade:
        return f"Contractors/{context.discipline_or_trade}"
    return misc


@dataclass(frozen=True)
class NamingInputs:
    """Everything a display-name template may use."""

    context: FilingContext
    file_name: str
    firm_name: str
    extension: str
    sequence: Optional[int] = None


@dataclass(frozen=True)
class FilingRule:
    """How one category picks its folder and display name.

    Attributes:
        folder: Maps (context, file name) to the target folder
        display_name: Renders the display name from NamingInputs
        sequence_token: Substring counted in the folder to derive the next
            number; None means the category is not numbered
        resolves_firm: Whether a named firm is found-or-created first
    """

    folder: Callable[[FilingContext, str], str]
    display_name: Callable[[NamingInputs], str]
    sequence_token: Optional[Callable[[str], str]] = None
    resolves_firm: bool = False


FILING_RULES: Dict[DocumentCategory, FilingRule] = {
    DocumentCategory.INVOICE: FilingRule(
        folder=lambda context, file_name: settings.filing.invoices_folder,
        display_name=lambda n: f"{n.firm_name}_Invoice_{n.sequence:03d}.{n.extension}",
        sequence_token=lambda firm_name: firm_name,
        resolves_firm=True,
    ),
    DocumentCategory.SUBMISSION: FilingRule(
        folder=lambda context, file_name: tender_folder(context),
        display_name=lambda n: f"{n.firm_name}_Submission_{n.sequence:02d}.{n.extension}",
        sequence_token=lambda firm_name: "Submission",
    ),
    DocumentCategory.TRR: FilingRule(
        folder=lambda context, file_name: tender_folder(context),
        display_name=lambda n: f"{n.firm_name}_TRR.{n.extension}",
    ),
    DocumentCategory.RFT: FilingRule(
        folder=lambda context, file_name: tender_folder(context),
        display_name=lambda n: (
            f"RFT_{n.context.discipline_or_trade or DEFAULT_DISCIPLINE}.{n.extension}"
        ),
    ),
    DocumentCategory.ADDENDUM: FilingRule(
        folder=lambda context, file_name: tender_folder(context),
        display_name=lambda n: f"Addendum_{n.sequence:02d}.{n.extension}",
        sequence_token=lambda firm_name: "Addendum",
    ),
    DocumentCategory.GENERAL: FilingRule(
        folder=general_folder,
        display_name=lambda n: n.file_name,
    ),
}

_missing = set(DocumentCategory) - set(FILING_RULES)
if _missing:
    raise RuntimeError(f"No filing rule for categories: {sorted(c.value for c in _missing)}")


class SequenceCounter:
    """Next ordinal for a numbered category, derived from existing documents."""

    def __init__(self, document_repo: DocumentRepository):
        self.document_repo = document_repo

    async def next_number(self, project_id: str, path: str, name_contains: str) -> int:
        existing = await self.document_repo.count_in_path(project_id, path, name_contains)
        return existing + 1


class FilingPathResolver:
    """Turns a category and upload context into a folder path and display name."""

    def __init__(self, sequence_counter: SequenceCounter, firm_registry: FirmRegistry):
        self.sequence_counter = sequence_counter
        self.firm_registry = firm_registry

    @staticmethod
    def target_path(category: DocumentCategory, context: FilingContext, file_name: str) -> str:
        """Folder a document of ``category`` will be filed into. Pure."""
        return FILING_RULES[category].folder(context, file_name)

    async def resolve(
        self,
        category: DocumentCategory,
        context: FilingContext,
        file_name: str,
        project_id: str,
        actor_id: Optional[str] = None,
    ) -> FilingResult:
        """Compute the final path and display name, consulting the database.

        The caller holds the path lock for ``target_path(...)`` until the
        document is committed, otherwise the sequence number can repeat.

        Args:
            category: Category from the classifier
            context: Upload context
            file_name: Original filename
            project_id: Owning project
            actor_id: Caller, recorded on a newly created firm

        Returns:
            FilingResult: Path, display name and the firm ID when one was resolved
        """
        rule = FILING_RULES[category]
        path = rule.folder(context, file_name)

        firm_name = context.firm_name or UNKNOWN_FIRM
        firm_id: Optional[str] = None
        if rule.resolves_firm and context.firm_name and context.firm_name != UNKNOWN_FIRM:
            firm = await self.firm_registry.resolve_firm(project_id, context.firm_name, actor_id)
            firm_id = str(firm.id)
            firm_name = firm.entity

        sequence = None
        if rule.sequence_token is not None:
            sequence = await self.sequence_counter.next_number(
                project_id, path, rule.sequence_token(firm_name)
            )

        display_name = rule.display_name(
            NamingInputs(
                context=context,
                file_name=file_name,
                firm_name=firm_name,
                extension=file_extension(file_name),
                sequence=sequence,
            )
        )
        LOGGER.debug(
            f"Resolved {category.value} filing: {path}/{display_name}",
            extra={"project_id": project_id, "firm_id": firm_id},
        )
        return FilingResult(path=path, display_name=display_name, category=category, firm_id=firm_id)


def preview(category: DocumentCategory, context: FilingContext, file_name: str) -> FilingPreview:
    """Same rules as ``FilingPathResolver.resolve`` without any I/O.

    The firm name is taken from the context as typed and every sequence is
    1, so the result is only a hint for the upload dialog.
    """
    rule = FILING_RULES[category]
    display_name = rule.display_name(
        NamingInputs(
            context=context,
            file_name=file_name,
            firm_name=context.firm_name or UNKNOWN_FIRM,
            extension=file_extension(file_name),
            sequence=1 if rule.sequence_token is not None else None,
        )
    )
    return FilingPreview(
        path=rule.folder(context, file_name),
        display_name=display_name,
        category=category,
    )
