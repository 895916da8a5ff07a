import logging
from contextlib import contextmanager
from django.db import DatabaseError, transaction
from rest_framework import permissions
from core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class IsClient(permissions.BasePermission):
    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return hasattr(request.user, 'client')


class IsStudent(permissions.BasePermission):
    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return hasattr(request.user, 'student')


def get_chat_id(uid1, uid2):
    """Deterministic chat thread id for an unordered pair of user ids."""
    return '_'.join(sorted([str(uid1), str(uid2)]))


@contextmanager
def atomic_write(operation):
    """
    Run a unit of work in one database transaction.

    Engine errors raised inside roll the transaction back and propagate as-is;
    database failures are reported as PersistenceError.
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as e:
        logger.error(f"Database write failed during {operation}: {str(e)}")
        raise PersistenceError() from e


def dispatch_on_commit(signal, sender, **kwargs):
    """
    Send ``signal`` once the current transaction commits.

    Receiver failures are logged and never reach the caller.
    """
    def _send():
        for receiver, response in signal.send_robust(sender=sender, **kwargs):
            if isinstance(response, Exception):
                logger.error(f"Receiver {getattr(receiver, '__name__', receiver)} failed: {str(response)}")

    transaction.on_commit(_send)
