"""
Per-request authentication state.

The state is built once per request by ``get_auth_state`` and handed to the
handlers that need it. Transitions go through ``auth_reducer`` only.
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

from ideation.schemas.records import PlayerRecord


@dataclass(frozen=True)
class AuthState:
    player: Optional[PlayerRecord] = None
    is_admin: bool = False
    auth_is_ready: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.player is not None


@dataclass(frozen=True)
class Login:
    player: PlayerRecord
    is_admin: bool = False


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class AuthIsReady:
    player: Optional[PlayerRecord] = None
    is_admin: bool = False


AuthAction = Union[Login, Logout, AuthIsReady]


def auth_reducer(state: AuthState, action: AuthAction) -> AuthState:
    if isinstance(action, Login):
        return replace(state, player=action.player, is_admin=action.is_admin)
    if isinstance(action, Logout):
        return replace(state, player=None, is_admin=False)
    if isinstance(action, AuthIsReady):
        return AuthState(player=action.player, is_admin=action.is_admin, auth_is_ready=True)
    return state
