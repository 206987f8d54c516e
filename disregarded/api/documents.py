# =============================================================================
# Document API Routes
# =============================================================================
#
#   GET    /documents                 - Caller's essays, all statuses (auth)
#   GET    /documents/public          - Published essays with author names
#   GET    /documents/{id}            - One essay (auth optional)
#   POST   /documents                 - Create a draft (auth)
#   PUT    /documents/{id}            - Edit title/content (owner)
#   PUT    /documents/{id}/publish    - Publish (owner)
#   PUT    /documents/{id}/unpublish  - Back to draft (owner)
#   DELETE /documents/{id}            - Delete (owner)
#
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from disregarded.auth import AuthContext, optional_auth, require_auth
from disregarded.core.models import AuthoredEssay, Essay
from disregarded.services.essays import EssayService

router = APIRouter(prefix="/documents", tags=["documents"])


def get_essay_service(request: Request) -> EssayService:
    return request.app.state.essays


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateEssayRequest(BaseModel):
    title: str | None = None
    content: str | None = None


class UpdateEssayRequest(BaseModel):
    title: str | None = None
    content: str | None = None


class EssayListResponse(BaseModel):
    documents: list[Essay]


class PublicEssayListResponse(BaseModel):
    documents: list[AuthoredEssay]


class EssayResponse(BaseModel):
    message: str | None = None
    document: Essay


class AuthoredEssayResponse(BaseModel):
    document: AuthoredEssay


# =============================================================================
# Listing
# =============================================================================


@router.get("", response_model=EssayListResponse)
def list_my_essays(
    ctx: AuthContext = Depends(require_auth()),
    essays: EssayService = Depends(get_essay_service),
):
    """List the caller's essays, most recently updated first."""
    return EssayListResponse(documents=essays.list_mine(ctx))


@router.get("/public", response_model=PublicEssayListResponse)
def list_public_essays(essays: EssayService = Depends(get_essay_service)):
    """List published essays from every author."""
    return PublicEssayListResponse(documents=essays.list_public())


# =============================================================================
# Single essay
# =============================================================================


@router.get("/{essay_id}", response_model=AuthoredEssayResponse)
def get_essay(
    essay_id: str,
    ctx: AuthContext = Depends(optional_auth()),
    essays: EssayService = Depends(get_essay_service),
):
    """
    Get an essay.
    
    Drafts are only returned to their owner; anyone else gets a 404.
    """
    return AuthoredEssayResponse(document=essays.get(essay_id, ctx))


@router.post("", response_model=EssayResponse, status_code=201)
def create_essay(
    request: CreateEssayRequest,
    ctx: AuthContext = Depends(require_auth()),
    essays: EssayService = Depends(get_essay_service),
):
    """Create a new draft."""
    essay = essays.create(ctx, request.title, request.content)
    return EssayResponse(message="Essay created", document=essay)


@router.put("/{essay_id}", response_model=EssayResponse)
def update_essay(
    essay_id: str,
    request: UpdateEssayRequest,
    ctx: AuthContext = Depends(require_auth()),
    essays: EssayService = Depends(get_essay_service),
):
    """Edit an essay's title and/or content."""
    essay = essays.update(essay_id, ctx, title=request.title, content=request.content)
    return EssayResponse(message="Essay updated", document=essay)


@router.put("/{essay_id}/publish", response_model=EssayResponse)
def publish_essay(
    essay_id: str,
    ctx: AuthContext = Depends(require_auth()),
    essays: EssayService = Depends(get_essay_service),
):
    return EssayResponse(message="Essay published", document=essays.publish(essay_id, ctx))


@router.put("/{essay_id}/unpublish", response_model=EssayResponse)
def unpublish_essay(
    essay_id: str,
    ctx: AuthContext = Depends(require_auth()),
    essays: EssayService = Depends(get_essay_service),
):
    return EssayResponse(message="Essay unpublished", document=essays.unpublish(essay_id, ctx))


@router.delete("/{essay_id}")
def delete_essay(
    essay_id: str,
    ctx: AuthContext = Depends(require_auth()),
    essays: EssayService = Depends(get_essay_service),
):
    essays.delete(essay_id, ctx)
    return {"message": "Essay deleted"}
