from pydantic import BaseModel
from typing import Optional


class ImageRequest(BaseModel):
    stockName: Optional[str] = None


class ImageResponse(BaseModel):
    imageUrl: str
