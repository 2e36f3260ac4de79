"""Edit lifecycle of a single session.

The session state is an immutable record; every transition replaces it.
The phase is one of Idle, Busy, Success or Failed. Each generation gets a
fresh request id, and a response is only applied while its id is still the
current one, so a newer file selection or generation wins over a slow reply.
"""

import base64
import itertools
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import Literal

import structlog

from src.config import settings
from src.core.exceptions import (
    EditorError,
    MalformedEncodingError,
    NoResultError,
    ServiceError,
    SessionBusyError,
    StaleResponseError,
    ValidationError,
)
from src.services import image_editor
from src.services.payload_encoder import (
    SourceFile,
    file_to_generative_part,
    parse_data_url,
    read_as_data_url,
    to_data_url,
)

logger = structlog.get_logger()

VALIDATION_MESSAGE = "Please upload an image and provide a modification prompt."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred while communicating with the AI."
EMPTY_RESULT_MESSAGE = "The AI did not return an image."

ImageEditFn = Callable[[str, str, str], Awaitable[str]]
FailureKind = Literal["validation", "encoding", "service"]


@dataclass(frozen=True)
class Idle:
    status: Literal["idle"] = "idle"


@dataclass(frozen=True)
class Busy:
    request_id: int
    status: Literal["busy"] = "busy"


@dataclass(frozen=True)
class Success:
    request_id: int
    image_data_url: str
    mime_type: str
    status: Literal["success"] = "success"


@dataclass(frozen=True)
class Failed:
    message: str
    kind: FailureKind
    status: Literal["failed"] = "failed"


EditPhase = Idle | Busy | Success | Failed


@dataclass(frozen=True)
class SessionState:
    source: SourceFile | None = None
    source_data_url: str | None = None
    instruction: str = ""
    phase: EditPhase = field(default_factory=Idle)

    @property
    def is_busy(self) -> bool:
        return isinstance(self.phase, Busy)

    @property
    def result(self) -> str | None:
        if isinstance(self.phase, Success):
            return self.phase.image_data_url
        return None

    @property
    def error_message(self) -> str | None:
        if isinstance(self.phase, Failed):
            return self.phase.message
        return None

    @property
    def can_generate(self) -> bool:
        return not self.is_busy and self.source is not None and bool(self.instruction)

    @property
    def can_download(self) -> bool:
        return isinstance(self.phase, Success)


@dataclass(frozen=True)
class DownloadFile:
    filename: str
    media_type: str
    content: bytes


def _error_message(error: Exception) -> str:
    return str(error) or UNKNOWN_ERROR_MESSAGE


class EditSession:
    def __init__(self, session_id: str, editor: ImageEditFn | None = None) -> None:
        self.session_id = session_id
        self._editor = editor
        self._state = SessionState()
        self._request_ids = itertools.count(1)
        self._current_request_id = 0

    @property
    def state(self) -> SessionState:
        return self._state

    async def _edit(self, base64_data: str, mime_type: str, instruction: str) -> str:
        # looked up per call, not bound at construction
        editor = self._editor or image_editor.edit_image
        return await editor(base64_data, mime_type, instruction)

    def _next_request_id(self) -> int:
        self._current_request_id = next(self._request_ids)
        return self._current_request_id

    def _settle(self, request_id: int, phase: Success | Failed) -> bool:
        if request_id != self._current_request_id:
            logger.info(
                "stale_edit_response_discarded",
                session_id=self.session_id,
                request_id=request_id,
                current_request_id=self._current_request_id,
            )
            return False
        self._state = replace(self._state, phase=phase)
        return True

    def select_file(self, source: SourceFile) -> SessionState:
        # invalidates any request still in flight
        self._next_request_id()
        try:
            preview = read_as_data_url(source)
        except MalformedEncodingError:
            preview = None
        self._state = replace(self._state, source=source, source_data_url=preview, phase=Idle())
        logger.info("source_selected", session_id=self.session_id, name=source.name, mime_type=source.mime_type)
        return self._state

    def set_instruction(self, instruction: str) -> SessionState:
        self._state = replace(self._state, instruction=instruction)
        return self._state

    async def generate(self) -> SessionState:
        state = self._state
        if state.is_busy:
            raise SessionBusyError("An edit is already in progress.")
        if state.source is None or not state.instruction:
            self._state = replace(state, phase=Failed(message=VALIDATION_MESSAGE, kind="validation"))
            raise ValidationError(VALIDATION_MESSAGE)

        request_id = self._next_request_id()
        self._state = replace(state, phase=Busy(request_id=request_id))
        logger.info("edit_started", session_id=self.session_id, request_id=request_id)

        try:
            phase = await self._run(request_id, state.source, state.instruction)
            settled = self._settle(request_id, phase)
        finally:
            # cancelled mid-call; nothing settled this request
            if self._state.phase == Busy(request_id=request_id):
                logger.warning("edit_abandoned", session_id=self.session_id, request_id=request_id)
                self._state = replace(self._state, phase=Idle())

        if not settled:
            raise StaleResponseError("The edit was superseded by a newer selection or request.")
        if isinstance(phase, Success):
            logger.info("edit_succeeded", session_id=self.session_id, request_id=request_id)
        return self._state

    async def _run(self, request_id: int, source: SourceFile, instruction: str) -> Success | Failed:
        try:
            payload = file_to_generative_part(source)
        except MalformedEncodingError as e:
            return Failed(message=_error_message(e), kind="encoding")

        try:
            result = await self._edit(payload.data, payload.mime_type, instruction)
            if not result:
                raise ServiceError(EMPTY_RESULT_MESSAGE)
        except Exception as e:
            kind: FailureKind = "encoding" if isinstance(e, MalformedEncodingError) else "service"
            if not isinstance(e, EditorError):
                logger.error("edit_failed_unexpectedly", session_id=self.session_id, error=repr(e))
            logger.warning("edit_failed", session_id=self.session_id, request_id=request_id, error=str(e))
            return Failed(message=_error_message(e), kind=kind)

        return Success(
            request_id=request_id,
            image_data_url=to_data_url(payload.mime_type, result),
            mime_type=payload.mime_type,
        )

    def download(self, now_ms: int | None = None) -> DownloadFile:
        phase = self._state.phase
        if not isinstance(phase, Success):
            raise NoResultError("There is no edited image to download.")
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        payload = parse_data_url(phase.image_data_url)
        # always .png, whatever the actual format
        return DownloadFile(
            filename=f"{settings.download_prefix}{now_ms}.png",
            media_type=payload.mime_type,
            content=base64.b64decode(payload.data),
        )
