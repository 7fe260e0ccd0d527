# MALI Ed Component System
# Pure Python Components for HTML generation

from .base import Component
from .layout import Layout
from .navigation import Navigation
from .pages import ClassLandingPage, ClassListPage, HomePage, SignInPage

__all__ = [
    "Component",
    "Layout",
    "Navigation",
    "ClassLandingPage",
    "ClassListPage",
    "HomePage",
    "SignInPage",
]
