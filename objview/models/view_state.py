from __future__ import annotations

from enum import Enum


class ViewState(Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    TEARING_DOWN = "tearing-down"
