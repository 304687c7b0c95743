from reply_stream.models.postgres.subscription_model import Subscription
from reply_stream.models.postgres.user_model import User
from reply_stream.models.postgres.response_history_model import ResponseHistory

__all__ = ["Subscription", "User", "ResponseHistory"]
