"""
Favorites: the caller's saved venues.
"""
from fastapi import APIRouter, Depends

from eventspace.api.deps import get_current_user, get_user_store
from eventspace.models.user import User
from eventspace.services import favorites_service
from eventspace.services.store import StoreClient

router = APIRouter()


@router.get("", response_model=list)
async def list_favorites(user: User = Depends(get_current_user), store: StoreClient = Depends(get_user_store)):
    return [v.model_dump(mode="json") for v in await favorites_service.list_favorites(store, user)]


@router.put("/{venue_id}", response_model=dict)
async def add_favorite(
    venue_id: str,
    user: User = Depends(get_current_user),
    store: StoreClient = Depends(get_user_store),
):
    await favorites_service.add_favorite(store, user, venue_id)
    return {"venue_id": venue_id, "favorite": True}


@router.delete("/{venue_id}", response_model=dict)
async def remove_favorite(
    venue_id: str,
    user: User = Depends(get_current_user),
    store: StoreClient = Depends(get_user_store),
):
    await favorites_service.remove_favorite(store, user, venue_id)
    return {"venue_id": venue_id, "favorite": False}
