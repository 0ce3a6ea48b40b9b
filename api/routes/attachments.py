"""Expense attachment routes."""
from __future__ import annotations

from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import StreamingResponse
from starlette.responses import Response as StarletteResponse

from api.dependencies import get_attachment_service
from application.dto import AttachmentDTO
from application.services.expense_attachment_service import ExpenseAttachmentService
from core.logging_config import get_logger
from core.response import Response as ApiResponse, success_response

logger = get_logger(__name__)

router = APIRouter(
    prefix="/expenses/{expense_id}/attachments",
    tags=["Expense attachments"],
)


def _content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.post(
    "",
    summary="Upload attachment",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[AttachmentDTO],
)
async def upload_attachment(
    expense_id: str,
    file: UploadFile = File(..., description="PDF, JPG, JPEG or PNG"),
    service: ExpenseAttachmentService = Depends(get_attachment_service),
):
    logger.info("attachment_upload_request", expense_id=expense_id, filename=file.filename)
    dto = await service.upload_attachment(
        expense_id,
        content=file.file,
        filename=file.filename,
        content_type=file.content_type,
        size=file.size,
    )
    return success_response(dto, message="Created")


@router.get(
    "",
    summary="List attachments",
    response_model=ApiResponse[list[AttachmentDTO]],
)
async def list_attachments(
    expense_id: str,
    service: ExpenseAttachmentService = Depends(get_attachment_service),
):
    items = await service.get_attachments_by_expense(expense_id)
    return success_response(items, message="OK")


@router.get(
    "/{attachment_id}",
    summary="Download attachment",
    response_class=StreamingResponse,
)
async def download_attachment(
    expense_id: str,
    attachment_id: UUID,
    service: ExpenseAttachmentService = Depends(get_attachment_service),
):
    attachment, resource = await service.download_attachment(attachment_id, expense_id=expense_id)
    return StreamingResponse(
        resource.iter_chunks(),
        media_type=attachment.mime_type or resource.content_type,
        headers={
            "Content-Disposition": _content_disposition(attachment.original_filename),
            "Content-Length": str(resource.size),
        },
    )


@router.delete(
    "/{attachment_id}",
    summary="Delete attachment",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=StarletteResponse,
)
async def delete_attachment(
    expense_id: str,
    attachment_id: UUID,
    service: ExpenseAttachmentService = Depends(get_attachment_service),
):
    await service.delete_attachment(attachment_id, expense_id=expense_id)
    return StarletteResponse(status_code=status.HTTP_204_NO_CONTENT)
