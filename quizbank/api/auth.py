import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from quizbank.api.quizzes import CamelModel, Message
from quizbank.core.auth import create_token, get_current_user
from quizbank.core.database import get_db
from quizbank.core.errors import InvalidArgument
from quizbank.core.identity import IdentityProvider, get_identity_provider
from quizbank.services.users import create_user, get_user_by_firebase_id

logger = logging.getLogger(__name__)

router = APIRouter()

class Credentials(BaseModel):
    email: str
    password: str

class UserOut(CamelModel):
    email: str
    firebase_id: str

class RegisteredUser(UserOut):
    id: str

class Registered(CamelModel):
    message: str
    user: RegisteredUser

class LoggedIn(CamelModel):
    message: str
    token: str
    user: UserOut

class Profile(CamelModel):
    message: str
    user: UserOut

@router.post("/register", response_model=Registered, status_code=201)
async def register(
    payload: Credentials,
    idp: IdentityProvider = Depends(get_identity_provider),
    db: AsyncSession = Depends(get_db),
):
    if not payload.email or "@" not in payload.email or len(payload.password) < 6:
        raise InvalidArgument("Invalid email or password (min 6 characters)")
    uid = await idp.create_account(payload.email, payload.password)
    user = await create_user(db, uid, payload.email)
    logger.info("Registered user %s", user.id)
    return Registered(message="User registered successfully", user=RegisteredUser.model_validate(user))

@router.post("/login", response_model=LoggedIn)
async def login(
    payload: Credentials,
    idp: IdentityProvider = Depends(get_identity_provider),
    db: AsyncSession = Depends(get_db),
):
    uid = await idp.sign_in(payload.email, payload.password)
    user = await get_user_by_firebase_id(db, uid)
    return LoggedIn(message="Login successful", token=create_token(uid), user=UserOut.model_validate(user))

@router.post("/logout", response_model=Message)
async def logout():
    # tokens are stateless; the client drops its copy
    return Message(message="Logout successful")

@router.get("/profile", response_model=Profile)
async def profile(principal: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    user = await get_user_by_firebase_id(db, principal)
    return Profile(message="Welcome to your profile!", user=UserOut.model_validate(user))
