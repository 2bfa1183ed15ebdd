from fastapi import Request

from roadmapper.core.database import ConnectionCache
from roadmapper.core.errors import AuthConfigError
from roadmapper.services.user_service import UserRepository


def get_connection_cache(request: Request) -> ConnectionCache:
    cache = getattr(request.app.state, "db", None)
    if cache is None:
        raise AuthConfigError(
            "Please define the MONGODB_URI or MONGO_URI environment variable inside .env"
        )
    return cache


async def get_user_repository(request: Request) -> UserRepository:
    cache = get_connection_cache(request)
    users = UserRepository(await cache.connect())
    if not cache.indexes_ready:
        # unique email index; create_index is a no-op when it already exists
        await users.ensure_indexes()
        cache.indexes_ready = True
    return users
