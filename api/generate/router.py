import logging
from typing import AsyncIterator

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.generate.schemas import ErrorResponse, GenerateRequest, GenerateResponse
from config import Settings, get_settings
from gemini_client import GeminiProxyError, InvalidPromptError
from .service import generate_text

logger = logging.getLogger(__name__)

PROMPT_REQUIRED_MESSAGE = "Prompt is required."
INTERNAL_ERROR_MESSAGE = "Internal Server Error while calling Gemini API"

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def get_http_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.timeout_seconds) as client:
        yield client


async def prompt_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return _error(400, PROMPT_REQUIRED_MESSAGE)


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_route(
    request: GenerateRequest,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    try:
        return await generate_text(request, settings=settings, client=client)
    except InvalidPromptError as exc:
        return _error(400, str(exc))
    except GeminiProxyError as exc:
        return _error(500, str(exc))
    except Exception:
        logger.exception("Gemini API error")
        return _error(500, INTERNAL_ERROR_MESSAGE)
