import base64
import binascii

import structlog
from google import genai
from google.genai import errors, types

from src.config import settings
from src.core.exceptions import ServiceError

logger = structlog.get_logger()

_client: genai.Client | None = None


def get_client() -> genai.Client:
    global _client
    if _client is None:
        if settings.gemini_api_key:
            _client = genai.Client(api_key=settings.gemini_api_key)
        else:
            # falls back to GEMINI_API_KEY / GOOGLE_API_KEY
            _client = genai.Client()
    return _client


def reset_client() -> None:
    global _client
    _client = None


def _extract_image(response: types.GenerateContentResponse) -> str:
    candidates = response.candidates or []
    parts = []
    if candidates and candidates[0].content and candidates[0].content.parts:
        parts = candidates[0].content.parts

    texts = []
    for part in parts:
        if part.inline_data and part.inline_data.data:
            return base64.b64encode(part.inline_data.data).decode()
        if part.text:
            texts.append(part.text)

    if texts:
        raise ServiceError(" ".join(texts).strip())
    raise ServiceError("The AI did not return an image. Try rephrasing the modification prompt.")


async def edit_image(base64_data: str, mime_type: str, instruction: str) -> str:
    """Send an image and an instruction to the image model, return the edited image as base-64."""
    try:
        image_bytes = base64.b64decode(base64_data, validate=True)
    except binascii.Error as e:
        raise ServiceError("Image payload is not valid base-64.") from e

    contents = [
        types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
        instruction,
    ]
    config = types.GenerateContentConfig(
        response_modalities=[types.Modality.IMAGE, types.Modality.TEXT],
    )

    try:
        client = get_client()
        response = await client.aio.models.generate_content(
            model=settings.gemini_model,
            contents=contents,
            config=config,
        )
    except errors.APIError as e:
        logger.error("image_edit_request_failed", model=settings.gemini_model, code=e.code, error=str(e))
        raise ServiceError(e.message or str(e)) from e
    except ValueError as e:
        # raised by the SDK when no API key is configured
        logger.error("image_edit_client_failed", error=str(e))
        raise ServiceError(str(e)) from e

    return _extract_image(response)
