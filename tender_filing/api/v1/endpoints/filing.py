"""Filing preview for the upload dialog."""

from fastapi import APIRouter

from tender_filing.schemas.documents import PreviewRequest, PreviewResponse
from tender_filing.services.filing.classifier import classify
from tender_filing.services.filing.path_resolver import preview
from tender_filing.utils.responses import action_success, create_api_response

router = APIRouter()


@router.post(
    "/preview",
    response_model=dict,
    summary="Preview where a file would be filed",
    operation_id="preview_filing",
)
async def preview_filing(request: PreviewRequest):
    """Advisory path and display name; never touches the database.

    Sequence numbers are always 1 and the firm name is used as typed, so the
    stored result can differ.
    """
    category = classify(request.file_name, request.context)
    result = preview(category, request.context, request.file_name)
    return create_api_response(
        action_success(
            PreviewResponse(
                path=result.path,
                display_name=result.display_name,
                category=result.category.value,
            )
        )
    )
