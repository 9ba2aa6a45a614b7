from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, rate_limit
from app.core.security import create_user_token
from app.crud import user as crud_user
from app.db.models.user import User
from app.schemas.common import Envelope, Message
from app.schemas.user import AuthResult, PasswordChange, ProfileUpdate, UserCreate, UserLogin, UserOut

router = APIRouter()


def _auth_result(user: User) -> AuthResult:
    return AuthResult(access_token=create_user_token(user.id), user=UserOut.model_validate(user))


@router.post("/register", response_model=Envelope[AuthResult], status_code=201, dependencies=[Depends(rate_limit)])
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    user = crud_user.create_user(db, user_in)
    return Envelope(data=_auth_result(user))


@router.post("/login", response_model=Envelope[AuthResult], dependencies=[Depends(rate_limit)])
def login(form: UserLogin, db: Session = Depends(get_db)):
    user = crud_user.authenticate(db, form.email, form.password)
    return Envelope(data=_auth_result(user))


@router.get("/profile", response_model=Envelope[UserOut])
def read_profile(current_user: User = Depends(get_current_user)):
    return Envelope(data=UserOut.model_validate(current_user))


@router.put("/profile", response_model=Envelope[UserOut])
def update_profile(
    profile_in: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = crud_user.update_profile(db, current_user, profile_in)
    return Envelope(data=UserOut.model_validate(user))


@router.put("/password", response_model=Envelope[Message])
def change_password(
    passwords: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    crud_user.change_password(db, current_user, passwords.current_password, passwords.new_password)
    return Envelope(data=Message(message="Password updated"))


@router.post("/deactivate", response_model=Envelope[Message])
def deactivate(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    crud_user.deactivate_user(db, current_user)
    return Envelope(data=Message(message="Account deactivated"))
