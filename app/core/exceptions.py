"""
Provider error hierarchy.

Services raise these; routers translate them into HTTP responses.
"""

from typing import Any, Optional


class ProviderError(Exception):
    """Base class for failures talking to an upstream provider"""


class QuoteProviderError(ProviderError):
    pass


class ChatProviderError(ProviderError):
    pass


class ImageProviderError(ProviderError):
    """Image provider returned an error response"""

    def __init__(self, message: str, status: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload


class ImageJobError(ProviderError):
    """Image job ended without a usable result"""


class MissingJobIdError(ImageJobError):
    pass


class MissingImageUrlError(ImageJobError):
    pass


class ImageJobTimeout(ImageJobError):
    def __init__(self, job_id: str, attempts: int):
        super().__init__(f"Image job {job_id} not ready after {attempts} polls")
        self.job_id = job_id
        self.attempts = attempts


class ImageJobCancelled(ImageJobError):
    def __init__(self, job_id: str):
        super().__init__(f"Image job {job_id} abandoned, client disconnected")
        self.job_id = job_id
