"""
Profile tags & comments API 라우터

- GET/POST /profiles/{wallet}/tags, DELETE /profiles/{wallet}/tags/{tag}
- PUT /profiles/{wallet}
- GET /tags, GET /tags/profiles?tags=a,b
- GET/POST /profiles/{wallet}/comments, DELETE /comments/{comment_id}
- GET /announcements
- GET /store/status
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query

from gachadash.config import settings
from gachadash.core.exception_handlers import error_response
from gachadash.deps import get_profile_store
from gachadash.schemas.common import BaseResponse, ErrorCode
from gachadash.schemas.profile import CommentCreate, ProfileUpdate, TagCreate
from gachadash.services.profile_store import ProfileStore, StoreResult

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profiles"])

_STATUS_BY_CODE = {
    ErrorCode.STORE_NOT_CONFIGURED: 503,
    ErrorCode.PROFILE_NOT_FOUND: 404,
    ErrorCode.STORE_ERROR: 502,
}


def _to_response(result: StoreResult, key: str) -> Any:
    if result.ok:
        return BaseResponse(success=True, data={key: result.data})

    code = result.error_code or ErrorCode.STORE_ERROR
    return error_response(
        _STATUS_BY_CODE.get(code, 502), code, result.error or "Store error"
    )


@router.get("/store/status", response_model=BaseResponse)
async def get_store_status(
    store: ProfileStore = Depends(get_profile_store),
) -> Any:
    return BaseResponse(
        success=True,
        data={"configured": store.configured, "defaultTags": settings.DEFAULT_TAGS},
    )


@router.get("/profiles/{wallet}", response_model=BaseResponse)
async def get_profile(
    wallet: str, store: ProfileStore = Depends(get_profile_store)
) -> Any:
    return _to_response(await store.get_profile(wallet), "profile")


@router.put("/profiles/{wallet}", response_model=BaseResponse)
async def update_profile(
    wallet: str,
    body: ProfileUpdate,
    store: ProfileStore = Depends(get_profile_store),
) -> Any:
    return _to_response(
        await store.update_profile(wallet, body.updates, author=body.author), "profile"
    )


@router.get("/profiles/{wallet}/tags", response_model=BaseResponse)
async def get_tags(
    wallet: str, store: ProfileStore = Depends(get_profile_store)
) -> Any:
    return _to_response(await store.get_tags(wallet), "tags")


@router.post("/profiles/{wallet}/tags", response_model=BaseResponse)
async def add_tag(
    wallet: str,
    body: TagCreate,
    store: ProfileStore = Depends(get_profile_store),
) -> Any:
    return _to_response(await store.add_tag(wallet, body.tag, author=body.author), "profile")


@router.delete("/profiles/{wallet}/tags/{tag}", response_model=BaseResponse)
async def remove_tag(
    wallet: str, tag: str, store: ProfileStore = Depends(get_profile_store)
) -> Any:
    return _to_response(await store.remove_tag(wallet, tag), "profile")


@router.get("/tags", response_model=BaseResponse)
async def get_all_tags(store: ProfileStore = Depends(get_profile_store)) -> Any:
    return _to_response(await store.get_all_tags(), "tags")


@router.get("/tags/profiles", response_model=BaseResponse)
async def get_profiles_by_tags(
    tags: str = Query(..., description="쉼표로 구분된 태그 목록"),
    store: ProfileStore = Depends(get_profile_store),
) -> Any:
    wanted = [t.strip() for t in tags.split(",") if t.strip()]
    return _to_response(await store.get_profiles_by_tags(wanted), "profiles")


@router.get("/profiles/{wallet}/comments", response_model=BaseResponse)
async def get_comments(
    wallet: str, store: ProfileStore = Depends(get_profile_store)
) -> Any:
    return _to_response(await store.get_comments(wallet), "comments")


@router.post("/profiles/{wallet}/comments", response_model=BaseResponse)
async def add_comment(
    wallet: str,
    body: CommentCreate,
    store: ProfileStore = Depends(get_profile_store),
) -> Any:
    return _to_response(
        await store.add_comment(wallet, body.comment, author=body.author), "comment"
    )


@router.delete("/comments/{comment_id}", response_model=BaseResponse)
async def delete_comment(
    comment_id: str, store: ProfileStore = Depends(get_profile_store)
) -> Any:
    result = await store.delete_comment(comment_id)
    if result.ok:
        return BaseResponse(success=True, data={"deleted": comment_id})
    return _to_response(result, "deleted")


@router.get("/announcements", response_model=BaseResponse)
async def get_announcements(
    limit: int = Query(100, ge=1, le=500),
    store: ProfileStore = Depends(get_profile_store),
) -> Any:
    return _to_response(await store.get_announcements_feed(limit=limit), "comments")
