from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    prompt: str | None = Field(default=None, description="Prompt to send to Gemini")


class GenerateResponse(BaseModel):
    text: str


class ErrorResponse(BaseModel):
    error: str
