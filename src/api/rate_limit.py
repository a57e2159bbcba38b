"""Rate limiter configuration."""

from slowapi import Limiter
from slowapi.util import get_remote_address


def _get_rate_limit_key(request):
    """Key by the authenticated user id when resolved, otherwise by IP."""
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return user_id
    return get_remote_address(request)


limiter = Limiter(key_func=_get_rate_limit_key)
