"""Filing rules: what a document is, where it goes and what it is called.

- classifier: filename and section keywords to a DocumentCategory
- path_resolver: category and context to folder path and display name
- firm_registry: find-or-create of firms named in the upload context
- fingerprint / validation: content checksum and batch upload limits
"""

from tender_filing.services.filing.classifier import classify
from tender_filing.services.filing.fingerprint import fingerprint
from tender_filing.services.filing.firm_registry import FirmRegistry
from tender_filing.services.filing.path_resolver import (
    FILING_RULES,
    FilingPathResolver,
    SequenceCounter,
    preview,
)
from tender_filing.services.filing.validation import UploadValidator

__all__ = [
    "classify",
    "fingerprint",
    "FirmRegistry",
    "FILING_RULES",
    "FilingPathResolver",
    "SequenceCounter",
    "preview",
    "UploadValidator",
]
