from uuid import uuid4

from fastapi import APIRouter
from starlette.status import HTTP_201_CREATED

from serenity.auth.tokens import create_access_token
from serenity.core.logging import logger
from serenity.schemas.track import TokenOut

router = APIRouter()


@router.post("/anonymous", response_model=TokenOut, status_code=HTTP_201_CREATED)
async def sign_in_anonymously():
    user_id = uuid4().hex
    logger.info(f"[auth] anonymous identity issued user={user_id}")
    return TokenOut(access_token=create_access_token(user_id), user_id=user_id)
