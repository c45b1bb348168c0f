from .auth import get_requester, login_required

__all__ = ['get_requester', 'login_required']
