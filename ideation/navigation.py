"""The platform's views as an explicit state machine."""

import enum
from typing import List

from ideation.errors import NavigationError
from ideation.session import AuthState


class View(str, enum.Enum):
    home = "home"
    ideation_space = "ideation_space"
    idea_assessments = "idea_assessments"
    player_page = "player_page"
    player_ranking = "player_ranking"
    admin = "admin"


def available_views(state: AuthState) -> List[View]:
    if not state.auth_is_ready or not state.is_authenticated:
        return [View.home]
    views = [
        View.home,
        View.ideation_space,
        View.idea_assessments,
        View.player_page,
        View.player_ranking,
    ]
    if state.is_admin:
        views.append(View.admin)
    return views


def transition(state: AuthState, current: View, target: View) -> View:
    """Return the view to show next, or raise NavigationError."""
    if target == current:
        return current
    if target not in available_views(state):
        if not state.is_authenticated:
            raise NavigationError(f"Sign in to open {target.value}")
        raise NavigationError(f"You are not authorized to view {target.value}")
    return target
