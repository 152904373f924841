from .auth import LoginView, RegisterView
from .cashiers import CashierViewSet
from .me import MeView

__all__ = [
    "RegisterView",
    "LoginView",
    "MeView",
    "CashierViewSet",
]
