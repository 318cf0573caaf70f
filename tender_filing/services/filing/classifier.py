"""Filename and context based document classification."""

from typing import Optional, Tuple

from tender_filing.models.filing import DocumentCategory, FilingContext

# Evaluated top to bottom; the first rule with a matching keyword wins.
# Keywords overlap ("inv" is inside many names), so order is part of the rule.
FILENAME_RULES: Tuple[Tuple[DocumentCategory, Tuple[str, ...]], ...] = (
    (DocumentCategory.INVOICE, ("invoice", "inv")),
    (DocumentCategory.SUBMISSION, ("submission", "tender response")),
    (DocumentCategory.TRR, ("trr", "recommendation")),
    (DocumentCategory.RFT, ("rft", "request for tender")),
    (DocumentCategory.ADDENDUM, ("addendum", "amendment")),
)

SECTION_RULES: Tuple[Tuple[DocumentCategory, Tuple[str, ...]], ...] = (
    (DocumentCategory.ADDENDUM, ("addendum",)),
    (DocumentCategory.SUBMISSION, ("submission",)),
    (DocumentCategory.TRR, ("recommendation", "trr")),
    (DocumentCategory.RFT, ("request", "rft")),
)


def _first_match(
    text: str, rules: Tuple[Tuple[DocumentCategory, Tuple[str, ...]], ...]
) -> Optional[DocumentCategory]:
    lowered = text.lower()
    for category, keywords in rules:
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


def classify(file_name: str, context: FilingContext) -> DocumentCategory:
    """Decide a document's category.

    Filename keywords always beat the card section the file was dropped
    into; the section name is only consulted when the filename says nothing.

    Args:
        file_name: Original filename as uploaded
        context: Upload context; only ``section_name`` is used here

    Returns:
        DocumentCategory: The matched category, or GENERAL
    """
    category = _first_match(file_name, FILENAME_RULES)
    if category is not None:
        return category

    if context.section_name:
        category = _first_match(context.section_name, SECTION_RULES)
        if category is not None:
            return category

    return DocumentCategory.GENERAL
