"""
Navigation router — which views the session may open.

Endpoints:
    GET  /navigation             → views available to the current session
    POST /navigation/transition  → move from one view to another
"""

from fastapi import APIRouter, Depends, HTTPException

from ideation.errors import NavigationError
from ideation.navigation import available_views, transition
from ideation.routers.auth import get_auth_state
from ideation.schemas.phase import NavigationOut, TransitionIn, TransitionOut
from ideation.session import AuthState

router = APIRouter(prefix="/navigation", tags=["navigation"])


@router.get("", response_model=NavigationOut)
async def views(state: AuthState = Depends(get_auth_state)):
    return NavigationOut(views=available_views(state))


@router.post("/transition", response_model=TransitionOut)
async def move(payload: TransitionIn, state: AuthState = Depends(get_auth_state)):
    try:
        view = transition(state, payload.current, payload.target)
    except NavigationError as e:
        status_code = 403 if state.is_authenticated else 401
        raise HTTPException(status_code=status_code, detail=str(e))
    return TransitionOut(view=view)
