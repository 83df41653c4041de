"""
Image Router
Logo-style artwork for a stock via the Black Forest Labs API
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.exceptions import (
    ImageJobCancelled,
    ImageJobTimeout,
    ImageProviderError,
    MissingImageUrlError,
    MissingJobIdError,
)
from app.schemas.common import ErrorResponse
from app.schemas.image import ImageRequest, ImageResponse
from app.services.image_services import ImageGenerationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Images"])

CLIENT_CLOSED_REQUEST = 499


def get_image_service(request: Request) -> ImageGenerationService:
    service = getattr(request.app.state, "image_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Image service unavailable")
    return service


@router.post(
    "/generate-image",
    response_model=ImageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_image(
    request: Request,
    payload: Optional[ImageRequest] = None,
    image_service: ImageGenerationService = Depends(get_image_service)
):
    stock_name = payload.stockName if payload else None
    if not stock_name:
        raise HTTPException(status_code=400, detail="Stock name is required")

    try:
        image_url = await image_service.generate(stock_name, is_disconnected=request.is_disconnected)
    except MissingJobIdError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="No request ID received from BFL API")
    except MissingImageUrlError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Failed to retrieve the image URL")
    except ImageJobTimeout as e:
        logger.warning(str(e))
        raise HTTPException(status_code=500, detail="Image generation timed out")
    except ImageJobCancelled as e:
        logger.info(str(e))
        raise HTTPException(status_code=CLIENT_CLOSED_REQUEST, detail="Client closed request")
    except ImageProviderError as e:
        logger.error(f"Error generating or fetching image: {e.payload or e}")
        raise HTTPException(status_code=500, detail="Failed to generate or retrieve image")
    except Exception as e:
        logger.error(f"Error generating or fetching image: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate or retrieve image")

    return ImageResponse(imageUrl=image_url)
