from reply_stream.database.postgresdb import PostgresDatabase
from reply_stream.database.redis_client import RedisManager

__all__ = ["PostgresDatabase", "RedisManager"]
