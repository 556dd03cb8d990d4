"""Session endpoints: upload, generate, edit and download."""

from typing import List, Optional
from fastapi import APIRouter, Request, HTTPException, Depends, File, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from ..core.dimensions import parse_format
from ..core.session import Session
from ..core.workflow import OutpaintWorkflow
from ..models.schemas import BatchOutcome, GeneratedResult, Stroke
from ..utils.logger import get_logger
from ..utils.errors import (
    OutpaintStudioError,
    InvalidRequestError,
    UnsupportedMediaTypeError,
    PayloadTooLargeError,
    DecodeError,
    GenerationError,
    SessionNotFoundError,
    ResultNotFoundError,
    StaleResultError,
)

logger = get_logger(__name__)

router = APIRouter()

# ============================================================================
# REQUEST / RESPONSE MODELS
# ============================================================================


class SessionResponse(BaseModel):
    """Summary of a session."""
    session_id: str
    filename: str
    content_type: str
    size_bytes: int
    description: str
    result_count: int


class GenerateRequest(BaseModel):
    """Formats to generate, as tags like "16:9"."""
    formats: List[str]


class GenerateResponse(BaseModel):
    """Batch outcome plus a user-facing message for partial failures."""
    outcome: BatchOutcome
    message: Optional[str] = None


class EditRequest(BaseModel):
    """Masked edit of one result."""
    instruction: str
    overlay_image: Optional[str] = None
    strokes: Optional[List[Stroke]] = None
    base_revision: Optional[int] = None


# ============================================================================
# ERROR MAPPING
# ============================================================================

_STATUS_CODES = [
    (UnsupportedMediaTypeError, 415),
    (PayloadTooLargeError, 413),
    (InvalidRequestError, 400),
    (SessionNotFoundError, 404),
    (ResultNotFoundError, 404),
    (StaleResultError, 409),
    (DecodeError, 422),
    (GenerationError, 502),
]


def to_http_exception(error: OutpaintStudioError) -> HTTPException:
    """Translate a studio error into an HTTP error."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


# ============================================================================
# DEPENDENCIES
# ============================================================================

async def get_workflow(request: Request) -> OutpaintWorkflow:
    """Dependency to get the workflow from app state."""
    return request.app.state.workflow


def _session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        session_id=session.id,
        filename=session.source.filename,
        content_type=session.source.content_type,
        size_bytes=session.source.size_bytes,
        description=session.description,
        result_count=len(session.results),
    )


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/", response_model=SessionResponse, status_code=201)
async def create_session(
    file: UploadFile = File(...),
    workflow: OutpaintWorkflow = Depends(get_workflow),
):
    """Upload a photo and open a session for it."""
    content = await file.read()

    try:
        session = await workflow.upload(content, file.filename, file.content_type)
    except OutpaintStudioError as e:
        logger.warning(
            f"Upload rejected: {e}",
            extra={"upload_filename": file.filename, "content_type": file.content_type}
        )
        raise to_http_exception(e)

    return _session_response(session)


@router.put("/{session_id}/image", response_model=SessionResponse)
async def replace_image(
    session_id: str,
    file: UploadFile = File(...),
    workflow: OutpaintWorkflow = Depends(get_workflow),
):
    """Replace the session's photo; results and in-flight batches are discarded."""
    content = await file.read()

    try:
        session = await workflow.replace_image(
            session_id, content, file.filename, file.content_type
        )
    except OutpaintStudioError as e:
        raise to_http_exception(e)

    return _session_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    workflow: OutpaintWorkflow = Depends(get_workflow),
):
    try:
        return _session_response(workflow.store.get(session_id))
    except OutpaintStudioError as e:
        raise to_http_exception(e)


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    workflow: OutpaintWorkflow = Depends(get_workflow),
):
    try:
        workflow.store.delete(session_id)
    except OutpaintStudioError as e:
        raise to_http_exception(e)
    return Response(status_code=204)


@router.post("/{session_id}/generate", response_model=GenerateResponse)
async def generate(
    session_id: str,
    body: GenerateRequest,
    workflow: OutpaintWorkflow = Depends(get_workflow),
):
    """Generate one outpainted image per requested format."""
    try:
        formats = [parse_format(tag) for tag in body.formats]
        outcome = await workflow.generate(session_id, formats)
    except OutpaintStudioError as e:
        raise to_http_exception(e)

    message = None
    if outcome.partial_failure:
        failed = ", ".join(f.value for f in outcome.failed)
        message = f"Some formats could not be generated: {failed}"

    return GenerateResponse(outcome=outcome, message=message)


@router.get("/{session_id}/results", response_model=List[GeneratedResult])
async def list_results(
    session_id: str,
    workflow: OutpaintWorkflow = Depends(get_workflow),
):
    try:
        return workflow.store.get(session_id).list_results()
    except OutpaintStudioError as e:
        raise to_http_exception(e)


@router.post("/{session_id}/results/{result_id}/edit", response_model=GeneratedResult)
async def edit_result(
    session_id: str,
    result_id: str,
    body: EditRequest,
    workflow: OutpaintWorkflow = Depends(get_workflow),
):
    """Apply a masked, prompt-guided edit to one result."""
    try:
        return await workflow.edit(
            session_id,
            result_id,
            instruction=body.instruction,
            overlay_image=body.overlay_image,
            strokes=body.strokes,
            base_revision=body.base_revision,
        )
    except OutpaintStudioError as e:
        logger.error(
            f"Edit failed: {e}",
            extra={"session_id": session_id, "result_id": result_id, "error": str(e)}
        )
        raise to_http_exception(e)


@router.get("/{session_id}/results/{result_id}/download")
async def download_result(
    session_id: str,
    result_id: str,
    workflow: OutpaintWorkflow = Depends(get_workflow),
):
    """Download a result as PNG named by its format."""
    try:
        filename, png_bytes = workflow.download(session_id, result_id)
    except OutpaintStudioError as e:
        raise to_http_exception(e)

    return Response(
        content=png_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
