from datetime import datetime
from uuid import UUID

from scrapbook_api.schemas.common import CamelModel


class UserResponse(CamelModel):
    id: UUID
    email: str
    name: str
    created_at: datetime
