from typing import Optional

from storefront.db.collections import USERS
from storefront.repository.base import BaseRepository
from storefront.schemas.user import User


class UserRepository(BaseRepository[User]):
    collection = USERS
    schema = User

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.get_first({"email": {"equals": email.strip().lower()}}, depth=0)
