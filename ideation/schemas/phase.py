"""Phase and navigation Pydantic schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from ideation.navigation import View


class PhasesOut(BaseModel):
    closing_dates: Dict[str, datetime]
    open: Dict[str, bool]
    disclaimer: Optional[str] = None


class NavigationOut(BaseModel):
    views: List[View]


class TransitionIn(BaseModel):
    current: View
    target: View


class TransitionOut(BaseModel):
    view: View
