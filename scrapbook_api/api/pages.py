import logging
from uuid import UUID

from fastapi import APIRouter, status

from scrapbook_api.api.deps import CurrentUser, DbSession
from scrapbook_api.schemas.common import SuccessResponse
from scrapbook_api.schemas.element import ElementCreatedResponse, ElementResponse, ElementSpec
from scrapbook_api.schemas.page import PageLayoutUpdate
from scrapbook_api.services.page_service import PageLayoutService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put("/{page_id}", response_model=SuccessResponse)
async def update_page_layout(
    page_id: UUID,
    body: PageLayoutUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> SuccessResponse:
    """Replace the page's layout.

    Background fields that are sent are applied; ``elements``, when sent,
    replaces every element on the page (an empty list clears the page).
    """
    await PageLayoutService(db).replace_layout(
        page_id,
        current_user.id,
        patch=body.page_patch(),
        elements=body.elements,
    )
    return SuccessResponse()


@router.post(
    "/{page_id}/elements",
    response_model=ElementCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_element(
    page_id: UUID,
    body: ElementSpec,
    current_user: CurrentUser,
    db: DbSession,
) -> ElementCreatedResponse:
    """Add one element without touching the others."""
    element = await PageLayoutService(db).add_element(page_id, current_user.id, body)
    return ElementCreatedResponse(element=ElementResponse.model_validate(element))
