"""Unit tests for folder paths, display names and numbering."""

import pytest

from conftest import CALLER_ID, PROJECT_ID
from tender_filing.models.filing import DocumentCategory, FilingContext
from tender_filing.services.filing.firm_registry import FirmRegistry
from tender_filing.services.filing.path_resolver import (
    FILING_RULES,
    FilingPathResolver,
    SequenceCounter,
    file_extension,
    preview,
)


@pytest.fixture
def resolver(doc_repo, firm_repo, locks):
    return FilingPathResolver(SequenceCounter(doc_repo), FirmRegistry(firm_repo, locks))


class TestFileExtension:

    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("invoice.pdf", "PDF"),
            ("Invoice.Final.docx", "DOCX"),
            ("scan", "PDF"),
        ],
    )
    def test_extension_is_uppercased_and_defaults_to_pdf(self, file_name, expected):
        assert file_extension(file_name) == expected


class TestFilingRules:

    def test_every_category_has_a_rule(self):
        assert set(FILING_RULES) == set(DocumentCategory)

    def test_target_path_needs_no_database(self):
        context = FilingContext(card_type="CONTRACTOR", discipline_or_trade="Electrical")
        path = FilingPathResolver.target_path(DocumentCategory.SUBMISSION, context, "bid.pdf")
        assert path == "Contractors/Electrical"


class TestResolve:
    """Tests for FilingPathResolver.resolve."""

    @pytest.mark.asyncio
    async def test_first_invoice_for_firm(self, resolver, firm_repo):
        """Test the invoice example: fixed folder, firm prefix and 001."""
        context = FilingContext(upload_location="contractor_card", firm_name="ABC Construction")

        result = await resolver.resolve(
            DocumentCategory.INVOICE, context, "inv-march.pdf", PROJECT_ID, CALLER_ID
        )

        assert result.path == "Invoices"
        assert result.display_name == "ABC Construction_Invoice_001.PDF"
        assert result.category == DocumentCategory.INVOICE
        firm = await firm_repo.find_active_by_name(PROJECT_ID, "ABC Construction")
        assert result.firm_id == str(firm.id)

    @pytest.mark.asyncio
    async def test_invoice_numbering_counts_existing_documents(self, resolver, doc_repo):
        """Test that the sequence is one more than the matching documents in the folder."""
        doc_repo.add(path="Invoices", display_name="ABC Construction_Invoice_001.PDF")
        doc_repo.add(path="Invoices", display_name="ABC Construction_Invoice_002.PDF")
        doc_repo.add(path="Invoices", display_name="XYZ Builders_Invoice_001.PDF")
        context = FilingContext(firm_name="ABC Construction")

        result = await resolver.resolve(
            DocumentCategory.INVOICE, context, "invoice", PROJECT_ID, CALLER_ID
        )

        assert result.display_name == "ABC Construction_Invoice_003.PDF"

    @pytest.mark.asyncio
    async def test_deleted_documents_do_not_count(self, resolver, doc_repo):
        doc_repo.add(
            path="Invoices",
            display_name="ABC Construction_Invoice_001.PDF",
            deleted_at=doc_repo._now(),
        )
        context = FilingContext(firm_name="ABC Construction")

        result = await resolver.resolve(
            DocumentCategory.INVOICE, context, "invoice.pdf", PROJECT_ID, CALLER_ID
        )

        assert result.display_name == "ABC Construction_Invoice_001.PDF"

    @pytest.mark.asyncio
    async def test_invoice_without_firm_uses_unknown(self, resolver, firm_repo):
        result = await resolver.resolve(
            DocumentCategory.INVOICE, FilingContext(), "invoice.pdf", PROJECT_ID, CALLER_ID
        )

        assert result.display_name == "Unknown_Invoice_001.PDF"
        assert result.firm_id is None
        assert firm_repo.firms == []

    @pytest.mark.asyncio
    async def test_submission_for_contractor(self, resolver, doc_repo):
        doc_repo.add(path="Contractors/Electrical", display_name="Sparky_Submission_01.PDF")
        context = FilingContext(
            card_type="CONTRACTOR", discipline_or_trade="Electrical", firm_name="Volt Co"
        )

        result = await resolver.resolve(
            DocumentCategory.SUBMISSION, context, "submission.pdf", PROJECT_ID, CALLER_ID
        )

        assert result.path == "Contractors/Electrical"
        assert result.display_name == "Volt Co_Submission_02.PDF"
        assert result.firm_id is None

    @pytest.mark.asyncio
    async def test_trr_for_consultant(self, resolver):
        context = FilingContext(
            card_type="CONSULTANT", discipline_or_trade="Structural", firm_name="Beam Eng"
        )

        result = await resolver.resolve(
            DocumentCategory.TRR, context, "trr.docx", PROJECT_ID, CALLER_ID
        )

        assert result.path == "Consultants/Structural"
        assert result.display_name == "Beam Eng_TRR.DOCX"

    @pytest.mark.asyncio
    async def test_rft_named_after_discipline(self, resolver):
        context = FilingContext(card_type="CONSULTANT", discipline_or_trade="Mechanical")

        result = await resolver.resolve(
            DocumentCategory.RFT, context, "rft.pdf", PROJECT_ID, CALLER_ID
        )

        assert result.path == "Consultants/Mechanical"
        assert result.display_name == "RFT_Mechanical.PDF"

    @pytest.mark.asyncio
    async def test_tender_documents_without_card_go_to_general_consultants(self, resolver):
        result = await resolver.resolve(
            DocumentCategory.ADDENDUM, FilingContext(), "addendum.pdf", PROJECT_ID, CALLER_ID
        )

        assert result.path == "Consultants/General"
        assert result.display_name == "Addendum_01.PDF"

    @pytest.mark.asyncio
    async def test_addenda_are_numbered_per_folder(self, resolver, doc_repo):
        doc_repo.add(path="Consultants/Civil", display_name="Addendum_01.PDF")
        doc_repo.add(path="Consultants/Civil", display_name="Addendum_02.PDF")
        doc_repo.add(path="Consultants/Mechanical", display_name="Addendum_01.PDF")
        context = FilingContext(card_type="CONSULTANT", discipline_or_trade="Civil")

        result = await resolver.resolve(
            DocumentCategory.ADDENDUM, context, "addendum 3.pdf", PROJECT_ID, CALLER_ID
        )

        assert result.display_name == "Addendum_03.PDF"

    @pytest.mark.asyncio
    async def test_general_keeps_original_name(self, resolver):
        result = await resolver.resolve(
            DocumentCategory.GENERAL, FilingContext(), "Site photo.jpg", PROJECT_ID, CALLER_ID
        )

        assert result.path == "Plan/Misc"
        assert result.display_name == "Site photo.jpg"

    @pytest.mark.asyncio
    async def test_general_on_consultant_card_uses_discipline_folder(self, resolver):
        context = FilingContext(upload_location="consultant_card", discipline_or_trade="Civil")

        result = await resolver.resolve(
            DocumentCategory.GENERAL, context, "photo.jpg", PROJECT_ID, CALLER_ID
        )

        assert result.path == "Consultants/Civil"

    @pytest.mark.asyncio
    async def test_plan_in_name_beats_card_location(self, resolver):
        context = FilingContext(upload_location="contractor_card", discipline_or_trade="Civil")

        result = await resolver.resolve(
            DocumentCategory.GENERAL, context, "Floor plan.pdf", PROJECT_ID, CALLER_ID
        )

        assert result.path == "Plan/Misc"


class TestPreview:
    """Tests for the I/O-free preview."""

    def test_preview_always_uses_sequence_one(self):
        context = FilingContext(firm_name="ABC Construction")

        result = preview(DocumentCategory.INVOICE, context, "invoice.pdf")

        assert result.path == "Invoices"
        assert result.display_name == "ABC Construction_Invoice_001.PDF"
        assert result.category == DocumentCategory.INVOICE

    def test_preview_matches_resolve_for_unnumbered_categories(self):
        context = FilingContext(card_type="CONSULTANT", discipline_or_trade="Hydraulic", firm_name="Flow")

        result = preview(DocumentCategory.TRR, context, "trr.pdf")

        assert result.path == "Consultants/Hydraulic"
        assert result.display_name == "Flow_TRR.PDF"
