from fastapi import APIRouter, Depends

from app.api.deps import (
    get_current_claims, get_current_user, get_orchestrator, get_second_factor,
)
from app.core.messages import AUTH_MESSAGES
from app.core.tokens import TokenPayload
from app.models.user import User
from app.schemas.auth import (
    AuthOut, LoginIn, LoginOut, MessageOut, RefreshIn, RefreshOut, SignupIn,
    TwoFAEnableOut, TwoFAVerifyIn, UserOut,
)
from app.services.second_factor import SecondFactorVerifier
from app.services.sessions import AuthenticatedSession, SessionOrchestrator

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_out(result: AuthenticatedSession) -> AuthOut:
    return AuthOut(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        user=UserOut.model_validate(result.user),
    )


@router.post("/signup", response_model=AuthOut, status_code=201)
async def signup(payload: SignupIn, orchestrator: SessionOrchestrator = Depends(get_orchestrator)):
    return _auth_out(await orchestrator.signup(payload.email, payload.password))


@router.post("/login", response_model=LoginOut, response_model_exclude_none=True)
async def login(payload: LoginIn, orchestrator: SessionOrchestrator = Depends(get_orchestrator)):
    result = await orchestrator.login(payload.email, payload.password)
    if not isinstance(result, AuthenticatedSession):
        # second factor on file: no token leaves the server yet
        return LoginOut(requires_2fa=True, user_id=result.user_id)
    out = _auth_out(result)
    return LoginOut(access_token=out.access_token, refresh_token=out.refresh_token, user=out.user)


@router.post("/refresh", response_model=RefreshOut)
async def refresh(payload: RefreshIn, orchestrator: SessionOrchestrator = Depends(get_orchestrator)):
    return RefreshOut(access_token=await orchestrator.refresh(payload.refresh_token))


# ---------- 2FA FLOW ----------
@router.post("/2fa/enable", response_model=TwoFAEnableOut)
async def twofa_enable(
    current_user: User = Depends(get_current_user),
    second_factor: SecondFactorVerifier = Depends(get_second_factor),
):
    setup = await second_factor.enable(current_user)
    return TwoFAEnableOut(
        secret=setup.secret, provisioning_uri=setup.provisioning_uri, qr_code=setup.qr_code
    )


@router.post("/2fa/verify", response_model=AuthOut)
async def twofa_verify(
    body: TwoFAVerifyIn, orchestrator: SessionOrchestrator = Depends(get_orchestrator)
):
    return _auth_out(await orchestrator.complete_second_factor(body.user_id, body.token))


@router.post("/2fa/disable", response_model=MessageOut)
async def twofa_disable(
    claims: TokenPayload = Depends(get_current_claims),
    second_factor: SecondFactorVerifier = Depends(get_second_factor),
):
    await second_factor.disable(claims.user_id)
    return MessageOut(message=AUTH_MESSAGES["twoFactorDisabled"])


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return UserOut.model_validate(current_user)
