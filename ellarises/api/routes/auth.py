"""Login, logout and signup routes."""

from fastapi import APIRouter, Depends, HTTPException, Request

from ...admin.people import register_participant
from ...auth import ROLE_USER, authenticate
from ..deps import RequestContext, get_request_context, require_auth
from ..schemas import LoginRequest, SignupRequest

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login")
def login(
    body: LoginRequest,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
):
    """Check credentials and store the resolved identity in the session."""
    with ctx.transaction() as session:
        user = authenticate(session, body.email, body.password)

    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    request.session['user'] = {'id': user['id'], 'role': user['role']}
    return {"status": "success", "user": user}

@router.post("/register", status_code=201)
def register(
    body: SignupRequest,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Create a participant account, optionally booking a seat with it, and log it in.

    The account and the booking are one transaction: if the program is full
    no account is created.
    """
    if body.confirm_password is not None and body.confirm_password != body.password:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    fields = body.model_dump(exclude={'confirm_password'})
    person, registration = ctx.run(register_participant, **fields)

    request.session['user'] = {'id': person.id, 'role': ROLE_USER}
    return {
        "status": "success",
        "user": {
            'id': person.id,
            'role': ROLE_USER,
            'email': person.email,
            'first_name': person.first_name,
            'last_name': person.last_name,
        },
        "registration": registration.to_dict() if registration else None,
    }

@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"status": "success"}

@router.get("/me")
def me(ctx: RequestContext = Depends(require_auth)):
    return {"id": ctx.user.id, "role": ctx.user.role}
