from storyfeed.core.context import FeedContext

__all__ = ["FeedContext"]
