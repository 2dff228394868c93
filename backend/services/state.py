from dataclasses import dataclass, field
from typing import List, Optional

from .auth_service import AuthUser
from .currency import BASE_CURRENCY
from .filters import FilterState


@dataclass
class AppState:
    """Per-session application state shared by reference with the services."""

    filters: FilterState = field(default_factory=FilterState)
    favorites: List[str] = field(default_factory=list)
    currency: str = BASE_CURRENCY
    user: Optional[AuthUser] = None
    message: Optional[str] = None  # empty-state text shown instead of the grid
