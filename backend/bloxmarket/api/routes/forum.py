"""
Forum endpoints.
"""
from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from bloxmarket.api.deps import CurrentUser, DbSession, OptionalUser
from bloxmarket.api.routes.engagement import register_engagement_routes
from bloxmarket.api.utils.pagination import Pagination
from bloxmarket.core.constants import ForumCategory, TargetType
from bloxmarket.models.content import ForumPost
from bloxmarket.models.user import User
from bloxmarket.schemas.common import MessageResponse
from bloxmarket.schemas.forum import ForumPostListResponse, ForumPostResponse, ForumPostUpdate
from bloxmarket.services.forum import ForumService

router = APIRouter()


async def build_post_responses(
    service: ForumService,
    posts: list[ForumPost],
    viewer: Optional[User],
) -> list[ForumPostResponse]:
    engagement = await service.summarize(posts, viewer)
    return [ForumPostResponse.build(post, engagement[post.id].as_dict()) for post in posts]


@router.get("", response_model=ForumPostListResponse)
async def list_posts(
    db: DbSession,
    page: Pagination,
    viewer: OptionalUser,
    category: Optional[ForumCategory] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    user_id: Optional[int] = Query(None),
):
    service = ForumService(db)
    posts, total = await service.list_posts(page.limit, page.offset, category=category, search=search, user_id=user_id)
    return ForumPostListResponse(
        posts=await build_post_responses(service, posts, viewer),
        pagination=page.meta(total),
    )


@router.post("", response_model=ForumPostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    current_user: CurrentUser,
    db: DbSession,
    title: str = Form(..., max_length=200),
    content: str = Form(..., max_length=20000),
    category: ForumCategory = Form(ForumCategory.GENERAL),
    images: Optional[list[UploadFile]] = File(None),
):
    service = ForumService(db)
    post = await service.create(current_user, title=title, content=content, category=category, images=images)
    return (await build_post_responses(service, [post], current_user))[0]


@router.get("/{post_id}", response_model=ForumPostResponse)
async def get_post(post_id: int, db: DbSession, viewer: OptionalUser):
    service = ForumService(db)
    post = await service.get(post_id)
    return (await build_post_responses(service, [post], viewer))[0]


@router.patch("/{post_id}", response_model=ForumPostResponse)
async def update_post(
    post_id: int,
    updates: ForumPostUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    service = ForumService(db)
    post = await service.get(post_id)
    post = await service.update(post, current_user, updates.model_dump(exclude_unset=True))
    return (await build_post_responses(service, [post], current_user))[0]


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: int, current_user: CurrentUser, db: DbSession):
    service = ForumService(db)
    post = await service.get(post_id)
    await service.delete(post, current_user)
    return MessageResponse(message="Post deleted successfully")


register_engagement_routes(router, TargetType.FORUM_POST)
