import logging
from typing import List

from src.backend.client import BackendClient, ConflictError
from src.schemas.newsletter import SignupRequest, Subscriber

logger = logging.getLogger(__name__)

SUBSCRIBERS_TABLE = "cookbook_subscribers"


class AlreadySubscribedError(Exception):
    """The email address is already on the list."""
    def __init__(self, email: str):
        super().__init__(f"{email} is already subscribed")
        self.email = email


class NewsletterService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def subscribe(self, signup: SignupRequest) -> Subscriber:
        row = signup.model_dump(exclude_none=True)
        try:
            created = await self.backend.insert(SUBSCRIBERS_TABLE, row)
        except ConflictError as e:
            logger.info(f"Duplicate newsletter signup for {signup.email}")
            raise AlreadySubscribedError(signup.email) from e
        logger.info(f"New newsletter subscriber (stage: {signup.project_stage or 'n/a'})")
        return Subscriber.model_validate(created)

    async def list_subscribers(self, limit: int = 100, offset: int = 0) -> List[Subscriber]:
        result = await self.backend.select(
            SUBSCRIBERS_TABLE, order="created_at", ascending=False, limit=limit, offset=offset
        )
        return [Subscriber.model_validate(row) for row in result.rows]
