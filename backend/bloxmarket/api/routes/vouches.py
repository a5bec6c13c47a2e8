"""
Vouch endpoints.
"""
from fastapi import APIRouter, status

from bloxmarket.api.deps import CurrentUser, DbSession
from bloxmarket.schemas.vouch import VouchCreate, VouchCreatedResponse, VouchResponse
from bloxmarket.services.vouches import VouchService

router = APIRouter()


@router.post("", response_model=VouchCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_vouch(body: VouchCreate, current_user: CurrentUser, db: DbSession):
    """
    Vouch for another user.

    Raises the ratee's credibility score by one.
    """
    service = VouchService(db)
    vouch = await service.create(
        current_user,
        ratee_id=body.user_id,
        rating=body.rating,
        comment=body.comment,
        trade_id=body.trade_id,
    )
    return VouchCreatedResponse(
        message="Vouch added successfully",
        vouch=VouchResponse.model_validate(vouch),
        credibility_score=await service.credibility(body.user_id),
    )


@router.delete("/{vouch_id}")
async def delete_vouch(vouch_id: int, current_user: CurrentUser, db: DbSession):
    """Remove a vouch (its author or staff). Lowers the ratee's score by one."""
    score = await VouchService(db).delete(vouch_id, current_user)
    return {"message": "Vouch removed successfully", "credibility_score": score}
