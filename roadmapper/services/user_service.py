import logging
from typing import Any, Dict, Optional

from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from roadmapper.core.errors import UserExistsError
from roadmapper.schemas.user import UserRecord

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


def _to_record(document: Dict[str, Any]) -> UserRecord:
    document = dict(document)
    if "_id" in document:
        document["id"] = str(document.pop("_id"))
    return UserRecord.model_validate(document)


class UserRepository:
    """User lookups and inserts. Passwords are only read when asked for."""

    def __init__(self, db: Any):
        self._users = db[USERS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._users.create_index([("email", ASCENDING)], unique=True)

    async def find_by_email(self, email: str, include_password: bool = False) -> Optional[UserRecord]:
        projection = None if include_password else {"password": 0}
        document = await self._users.find_one({"email": email}, projection)
        return _to_record(document) if document else None

    async def create(self, user: UserRecord) -> UserRecord:
        document = user.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)
        try:
            result = await self._users.insert_one(document)
        except DuplicateKeyError as e:
            raise UserExistsError() from e
        logger.info(f"[DB] Created user {user.email} (role={user.role})")
        return user.model_copy(update={"id": str(result.inserted_id), "password": None})
