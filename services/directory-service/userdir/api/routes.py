"""HTTP route definitions for the directory service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from schemas import AccountForm, AccountSummary

from ..domain.account import Account
from ..domain.contracts import AccountEditRequest
from ..domain.errors import Rejected, Saved
from ..domain.service import DirectoryService
from ..security.rate_limiter import SlidingWindowRateLimiter

router = APIRouter(prefix="/v1")

SAVED_MESSAGE = "User saved."


class AccountListResponse(BaseModel):
    """Sorted account listing."""

    users: list[AccountSummary]


class AccountFormSubmission(BaseModel):
    """Payload accepted when creating or replacing an account."""

    name: str = ""
    disabled: bool = False
    displayname: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    groups: str = ""

    def to_edit_request(self) -> AccountEditRequest:
        return AccountEditRequest(
            name=self.name,
            display_name=self.displayname,
            password=self.password,
            confirm_password=self.confirm_password,
            disabled=self.disabled,
            email=self.email,
            groups=self.groups,
        )


class PasswordCheckRequest(BaseModel):
    """Candidate password to verify against a stored account."""

    password: str


class PasswordCheckResponse(BaseModel):
    """Outcome of a password check."""

    valid: bool


class SaveAccountResponse(BaseModel):
    """Result of a save, echoing the submitted form without its passwords."""

    success: str | None = None
    error: str | None = None
    form: AccountForm


def _summary(name: str, account: Account) -> AccountSummary:
    return AccountSummary(
        name=name,
        disabled=account.disabled,
        displayname=account.display_name,
        email=account.email,
        groups=account.groups,
    )


def _form(request: AccountEditRequest, *, exists: bool | None) -> AccountForm:
    return AccountForm(
        name=request.name,
        disabled=request.disabled,
        displayname=request.display_name,
        email=request.email,
        groups=request.groups,
        exists=exists,
    )


def get_service(request: Request) -> DirectoryService:
    """Resolve the `DirectoryService` stored on the FastAPI application state."""
    service: DirectoryService = request.app.state.directory_service
    return service


def get_verify_limiter(request: Request) -> SlidingWindowRateLimiter:
    """Resolve the password-check rate limiter stored on the application state."""
    limiter: SlidingWindowRateLimiter = request.app.state.verify_limiter
    return limiter


@router.get("/users", response_model=AccountListResponse)
def list_users(service: DirectoryService = Depends(get_service)) -> AccountListResponse:
    """Return all accounts sorted by name."""
    return AccountListResponse(users=[_summary(name, account) for name, account in service.list_accounts()])


@router.get("/users/{name}", response_model=AccountForm)
def edit_user(name: str, service: DirectoryService = Depends(get_service)) -> AccountForm:
    """Return the edit form for ``name``; unknown names yield an empty form."""
    account = service.find_account(name)
    exists = account is not None
    request = AccountEditRequest.from_account(name, account if exists else Account())
    return _form(request, exists=exists)


@router.post("/users", response_model=SaveAccountResponse)
def save_user(
    payload: AccountFormSubmission,
    service: DirectoryService = Depends(get_service),
) -> SaveAccountResponse | JSONResponse:
    """Create or fully replace an account from the submitted form."""
    request = payload.to_edit_request()
    match service.save_account(request):
        case Saved():
            return SaveAccountResponse(success=SAVED_MESSAGE, form=_form(request, exists=True))
        case Rejected(error=error):
            body = SaveAccountResponse(error=error.message, form=_form(request, exists=None))
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content=body.model_dump(),
            )


@router.delete("/users/{name}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(name: str, service: DirectoryService = Depends(get_service)) -> Response:
    """Delete ``name``; unknown names are accepted silently."""
    service.delete_account(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/users/{name}/verify", response_model=PasswordCheckResponse)
def verify_user_password(
    name: str,
    payload: PasswordCheckRequest,
    service: DirectoryService = Depends(get_service),
    limiter: SlidingWindowRateLimiter = Depends(get_verify_limiter),
) -> PasswordCheckResponse:
    """Check a candidate password against the stored credential of ``name``."""
    if not limiter.allow(f"verify:{name}"):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")
    return PasswordCheckResponse(valid=service.check_password(name, payload.password))
