from pydantic import BaseModel
from typing import Optional


class ChatRequest(BaseModel):
    prompt: Optional[str] = None


class ChatResponse(BaseModel):
    response: Optional[str] = None
