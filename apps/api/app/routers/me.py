from fastapi import APIRouter, Depends
from app.core.current_user import get_current_user
from app.models.user import User
from app.schemas.user import UserOut

router = APIRouter(tags=["me"])

@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user
