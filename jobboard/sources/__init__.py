from .base import JobSourceBase
from .fallback import FallbackSource
from .remote import JobApiGateway

__all__ = ["JobSourceBase", "FallbackSource", "JobApiGateway"]
