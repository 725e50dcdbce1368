"""
User endpoints - list with filters, CRUD, in-memory reset (RESTful API).
Design: Thin controller; the directory service holds business logic and
domain errors are rendered by the app's exception handlers.
"""

from typing import Any

from fastapi import APIRouter, Body, Query, status

from user_directory.core.dependencies import Directory
from user_directory.schemas.user import UserEnvelope, UserPage, UserQuery

router = APIRouter()


@router.get("", response_model=UserPage, response_model_exclude_none=True)
async def list_users(
    service: Directory,
    search: str | None = None,
    name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    place: str | None = None,
    gender: str | None = None,
    country_code: str | None = Query(None, alias="countryCode"),
    hobbies: list[str] | None = Query(None),
    page: str | None = None,
    limit: str | None = None,
    sort: str | None = None,
):
    """List users. REST: GET /users?search=&hobbies=a&hobbies=b&sort=name:asc&page=1&limit=10."""
    query = UserQuery(
        search=search,
        name=name,
        email=email,
        phone=phone,
        place=place,
        gender=gender,
        country_code=country_code,
        hobbies=hobbies,
        page=page,
        limit=limit,
        sort=sort,
    )
    return await service.list_users(query)


# Declared before /{user_id} so the path is not captured as an id
@router.post("/reset-db")
async def reset_db(service: Directory):
    """Clear the in-memory store. 400 when the durable store is active."""
    await service.reset()
    return {"success": True, "message": "In-memory database has been reset"}


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(service: Directory, user_id: str):
    return UserEnvelope(data=await service.get_user(user_id))


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def create_user(service: Directory, payload: Any = Body(...)):
    """Create user. Body is validated by the service so every field error is reported."""
    return UserEnvelope(data=await service.create_user(payload))


@router.put("/{user_id}", response_model=UserEnvelope)
async def update_user(service: Directory, user_id: str, payload: Any = Body(...)):
    """Replace all fields of a user. countryCode is required here."""
    return UserEnvelope(data=await service.update_user(user_id, payload))


@router.delete("/{user_id}")
async def delete_user(service: Directory, user_id: str):
    await service.delete_user(user_id)
    return {"success": True, "data": {}}
