"""Unit tests for filename and section based classification."""

import pytest

from tender_filing.models.filing import DocumentCategory, FilingContext
from tender_filing.services.filing.classifier import classify


class TestFilenameRules:
    """Filename keywords decide the category on their own."""

    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("ABC_Invoice_March.pdf", DocumentCategory.INVOICE),
            ("inv-2031.pdf", DocumentCategory.INVOICE),
            ("Tender Submission - Mechanical.pdf", DocumentCategory.SUBMISSION),
            ("Tender Response Final.docx", DocumentCategory.SUBMISSION),
            ("TRR Electrical.pdf", DocumentCategory.TRR),
            ("Recommendation report.pdf", DocumentCategory.TRR),
            ("RFT Hydraulics.pdf", DocumentCategory.RFT),
            ("Request for Tender - Civil.pdf", DocumentCategory.RFT),
            ("Addendum 3.pdf", DocumentCategory.ADDENDUM),
            ("Amendment to drawings.pdf", DocumentCategory.ADDENDUM),
            ("Site photo.jpg", DocumentCategory.GENERAL),
        ],
    )
    def test_keyword_selects_category(self, file_name, expected):
        assert classify(file_name, FilingContext()) == expected

    def test_matching_is_case_insensitive(self):
        assert classify("FINAL_INVOICE.PDF", FilingContext()) == DocumentCategory.INVOICE

    def test_earlier_rule_wins_when_several_match(self):
        """Test that invoice beats submission when both keywords appear."""
        assert classify("Submission invoice.pdf", FilingContext()) == DocumentCategory.INVOICE


class TestSectionFallback:
    """The section name only matters when the filename says nothing."""

    def test_filename_beats_section(self):
        context = FilingContext(section_name="Addendum")
        assert classify("Invoice 12.pdf", context) == DocumentCategory.INVOICE

    @pytest.mark.parametrize(
        "section_name,expected",
        [
            ("Addendum", DocumentCategory.ADDENDUM),
            ("Tender Submissions", DocumentCategory.SUBMISSION),
            ("Tender Recommendation", DocumentCategory.TRR),
            ("Request For Tender", DocumentCategory.RFT),
        ],
    )
    def test_section_selects_category(self, section_name, expected):
        context = FilingContext(section_name=section_name)
        assert classify("scan_0001.pdf", context) == expected

    def test_unmatched_section_is_general(self):
        context = FilingContext(section_name="Drawings")
        assert classify("scan_0001.pdf", context) == DocumentCategory.GENERAL
