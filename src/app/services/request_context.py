from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    """Client details attached to sessions and security events"""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
