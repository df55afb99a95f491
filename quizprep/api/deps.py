from typing import Optional

from fastapi import Header


def get_caller_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Caller identity supplied by the upstream auth layer, if any."""

    return x_user_id or None
