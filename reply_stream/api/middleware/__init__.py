from reply_stream.api.middleware.auth_middleware import AuthContext, get_auth_context
from reply_stream.api.middleware.rate_limit_middleware import rate_limit, check_strict_rate_limit

__all__ = ["AuthContext", "get_auth_context", "rate_limit", "check_strict_rate_limit"]
