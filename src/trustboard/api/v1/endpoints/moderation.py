# src/trustboard/api/v1/endpoints/moderation.py
"""Moderation preview endpoint."""

from fastapi import APIRouter

from trustboard.schemas.moderation import ModerationCheckRequest, ModerationResultResponse

from .deps import PipelineDep

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.post("/check", response_model=ModerationResultResponse)
async def check_text(
    payload: ModerationCheckRequest,
    pipeline: PipelineDep,
) -> dict[str, object]:
    """Run text through the moderation pipeline without storing anything."""
    result = await pipeline.moderate(payload.text)
    return result.to_dict()
