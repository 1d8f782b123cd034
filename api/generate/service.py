import httpx

from api.generate.schemas import GenerateRequest, GenerateResponse
from config import Settings
from gemini_client import ask_gemini


async def generate_text(request: GenerateRequest, *, settings: Settings, client: httpx.AsyncClient) -> GenerateResponse:
    text = await ask_gemini(request.prompt, settings=settings, client=client)
    return GenerateResponse(text=text)
