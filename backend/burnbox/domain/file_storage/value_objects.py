"""
File Storage Value Objects
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class TransferHandle:
    """
    Time-limited capability to upload or download one blob.

    Handles are stateless: nothing records that one was issued.
    """
    url: str
    method: str
    expires_at: datetime
    headers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "method": self.method,
            "expiresAt": self.expires_at.isoformat(),
            "headers": dict(self.headers),
        }
