import structlog
from fastapi import APIRouter, File, UploadFile
from fastapi.responses import Response

from src.config import settings
from src.core.exceptions import (
    AppError,
    MalformedEncodingError,
    NoResultError,
    SessionBusyError,
    StaleResponseError,
    ValidationError,
)
from src.schemas.sessions import (
    InstructionRequest,
    SessionCreateResponse,
    SessionDeleteResponse,
    SessionStateResponse,
)
from src.services import session_store
from src.services.edit_session import EditSession, Failed
from src.services.payload_encoder import DEFAULT_MIME_TYPE, SourceFile, detect_mime_type

logger = structlog.get_logger()

router = APIRouter(prefix="/sessions")

_FAILURE_STATUS = {
    "validation": 400,
    "encoding": 422,
    "service": 502,
}


def _validate_path_segment(value: str, name: str) -> None:
    if not value or ".." in value or "/" in value:
        raise AppError(status_code=400, detail=f"Invalid {name}")


def _get_session(session_id: str) -> EditSession:
    _validate_path_segment(session_id, "session_id")
    session = session_store.get_session(session_id)
    if session is None:
        raise AppError(status_code=404, detail="Session not found")
    return session


def _state_response(session: EditSession) -> SessionStateResponse:
    state = session.state
    source = state.source
    return SessionStateResponse(
        session_id=session.session_id,
        status=state.phase.status,
        instruction=state.instruction,
        source_name=source.name if source else None,
        source_mime_type=source.mime_type if source else None,
        source_data_url=state.source_data_url,
        result=state.result,
        error=state.error_message,
        can_generate=state.can_generate,
        can_download=state.can_download,
        accepted_mime_types=settings.accepted_mime_types,
    )


def _resolve_mime_type(declared: str | None, content: bytes) -> str:
    if declared and declared != DEFAULT_MIME_TYPE:
        return declared
    return detect_mime_type(content) or declared or DEFAULT_MIME_TYPE


@router.post("", response_model=SessionCreateResponse)
async def create_session() -> SessionCreateResponse:
    session = session_store.create_session()
    return SessionCreateResponse(session_id=session.session_id)


@router.get("/{session_id}", response_model=SessionStateResponse)
async def get_session_state(session_id: str) -> SessionStateResponse:
    return _state_response(_get_session(session_id))


@router.delete("/{session_id}", response_model=SessionDeleteResponse)
async def delete_session(session_id: str) -> SessionDeleteResponse:
    _validate_path_segment(session_id, "session_id")
    return SessionDeleteResponse(deleted=session_store.delete_session(session_id))


@router.put("/{session_id}/source", response_model=SessionStateResponse)
async def select_source(session_id: str, file: UploadFile = File(...)) -> SessionStateResponse:
    session = _get_session(session_id)
    content = await file.read()
    source = SourceFile(
        name=file.filename or "upload",
        mime_type=_resolve_mime_type(file.content_type, content),
        content=content,
    )
    if source.mime_type not in settings.accepted_mime_types:
        logger.warning("unexpected_source_type", session_id=session_id, mime_type=source.mime_type)
    session.select_file(source)
    return _state_response(session)


@router.put("/{session_id}/instruction", response_model=SessionStateResponse)
async def set_instruction(session_id: str, body: InstructionRequest) -> SessionStateResponse:
    session = _get_session(session_id)
    session.set_instruction(body.instruction)
    return _state_response(session)


@router.post("/{session_id}/generate", response_model=SessionStateResponse)
async def generate(session_id: str) -> SessionStateResponse:
    session = _get_session(session_id)
    try:
        state = await session.generate()
    except ValidationError as e:
        raise AppError(status_code=400, detail=str(e)) from e
    except SessionBusyError as e:
        raise AppError(status_code=409, detail=str(e)) from e
    except StaleResponseError as e:
        raise AppError(status_code=409, detail=str(e)) from e

    if isinstance(state.phase, Failed):
        raise AppError(status_code=_FAILURE_STATUS[state.phase.kind], detail=state.phase.message)
    return _state_response(session)


@router.get("/{session_id}/download")
async def download(session_id: str) -> Response:
    session = _get_session(session_id)
    try:
        result = session.download()
    except NoResultError as e:
        raise AppError(status_code=404, detail=str(e)) from e
    except MalformedEncodingError as e:
        raise AppError(status_code=422, detail=str(e)) from e

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
