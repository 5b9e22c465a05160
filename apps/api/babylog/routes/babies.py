from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..auth import AuthContext, get_auth_context
from ..babies import create_baby, delete_baby_for_user, get_baby_for_user, list_babies_for_user, update_baby
from ..schemas import Baby, CreateBabyPayload, UpdateBabyPayload

router = APIRouter(prefix="/api/v1", tags=["babies"])


@router.get("/babies", response_model=List[Baby])
async def list_babies_endpoint(auth: AuthContext = Depends(get_auth_context)) -> List[Baby]:
    return list_babies_for_user(auth.user_id)


@router.post("/babies", response_model=Baby, status_code=201)
async def create_baby_endpoint(
    payload: CreateBabyPayload,
    auth: AuthContext = Depends(get_auth_context),
) -> Baby:
    name = (payload.name or "").strip()
    if not name or payload.birth_date is None:
        raise HTTPException(status_code=400, detail="Name and birth date are required")
    return create_baby(auth.user_id, name=name, birth_date=payload.birth_date)


@router.get("/babies/{baby_id}", response_model=Baby)
async def get_baby_endpoint(baby_id: str, auth: AuthContext = Depends(get_auth_context)) -> Baby:
    baby = get_baby_for_user(baby_id, auth.user_id)
    if baby is None:
        raise HTTPException(status_code=404, detail="Baby not found")
    return baby


@router.put("/babies/{baby_id}", response_model=Baby)
async def update_baby_endpoint(
    baby_id: str,
    payload: UpdateBabyPayload,
    auth: AuthContext = Depends(get_auth_context),
) -> Baby:
    name = payload.name.strip() if payload.name is not None else None
    if name == "":
        raise HTTPException(status_code=400, detail="name cannot be empty")
    baby = update_baby(baby_id, auth.user_id, name=name, birth_date=payload.birth_date)
    if baby is None:
        raise HTTPException(status_code=404, detail="Baby not found")
    return baby


@router.delete("/babies/{baby_id}")
async def delete_baby_endpoint(baby_id: str, auth: AuthContext = Depends(get_auth_context)) -> dict:
    if not delete_baby_for_user(baby_id, auth.user_id):
        raise HTTPException(status_code=404, detail="Baby not found")
    return {"success": True}
