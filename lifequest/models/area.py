"""Life dimension enum shared by progress and quest models"""
from enum import Enum


class LifeArea(str, Enum):
    """Life dimensions activities are logged against"""
    PHYSICAL = "physical"
    MENTAL = "mental"
    PRODUCTIVITY = "productivity"
    SOCIAL = "social"
    FINANCIAL = "financial"
    PERSONAL = "personal"
    SPIRITUAL = "spiritual"
