"""CLI commands for pr-tracker."""

from .auth import confirm, signup
from .calc import calc
from .chat import chat
from .init import init
from .movements import movements
from .prs import prs
from .serve import serve
from .wods import wods

__all__ = [
    "calc",
    "chat",
    "confirm",
    "init",
    "movements",
    "prs",
    "serve",
    "signup",
    "wods",
]
