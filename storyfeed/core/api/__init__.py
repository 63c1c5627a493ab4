from storyfeed.core.api.base import BaseAPIClient, FetchError, ParseError
from storyfeed.core.api.profiles import ProfilesClient

__all__ = [
    "BaseAPIClient",
    "FetchError",
    "ParseError",
    "ProfilesClient",
]
