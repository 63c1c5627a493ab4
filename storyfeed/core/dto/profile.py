from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ProfileDTO:
    id: int
    instagram_id: str

    user_id: Optional[int] = None
    id_profile: Optional[str] = None
