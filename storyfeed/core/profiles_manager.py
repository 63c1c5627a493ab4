from __future__ import annotations

from typing import List, Optional
import logging

from storyfeed.core.api import ProfilesClient
from storyfeed.core.dto.profile import ProfileDTO

logger = logging.getLogger(__name__)


def _optional_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


class ProfilesManager:
    """
    Domain manager for the profile selector.

    Returns DTOs only; the listing never takes part in feed pagination.
    """

    def __init__(self, client: Optional[ProfilesClient] = None):
        self._client = client or ProfilesClient()

    def get_profiles(self) -> List[ProfileDTO]:
        profiles = []
        for raw in self._client.get_profiles():
            if not raw.get("instagram_id"):
                logger.debug(f"Dropping profile without instagram_id: {raw}")
                continue
            try:
                profile = ProfileDTO(
                    id=int(raw["id"]),
                    instagram_id=raw["instagram_id"],
                    user_id=_optional_int(raw.get("user_id")),
                    id_profile=str(raw["id_profile"]) if raw.get("id_profile") is not None else None,
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Dropping malformed profile {raw}: {e}")
                continue
            profiles.append(profile)
        return profiles

    def search_profiles(self, term: str) -> List[ProfileDTO]:
        """Case-insensitive substring match on instagram_id; empty term returns all."""
        needle = (term or "").strip().lower()
        profiles = self.get_profiles()
        if not needle:
            return profiles
        return [p for p in profiles if needle in p.instagram_id.lower()]
