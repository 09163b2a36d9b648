from typing import Callable, List
import logging

from app.services.errors import PermissionDeniedError

logger = logging.getLogger(__name__)

PermissionErrorListener = Callable[[PermissionDeniedError], None]

_listeners: List[PermissionErrorListener] = []


def subscribe(listener: PermissionErrorListener) -> None:
    if listener not in _listeners:
        _listeners.append(listener)


def unsubscribe(listener: PermissionErrorListener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def report_permission_error(error: PermissionDeniedError) -> None:
    """
    Publishes a permission error to every subscribed listener.

    A failing listener is logged and skipped so the others still run.
    """
    logger.error(
        f"Permission denied: operation={error.operation} path={error.path} "
        f"request_data={error.request_data}"
    )
    for listener in list(_listeners):
        try:
            listener(error)
        except Exception as e:
            logger.error(f"Permission error listener failed: {str(e)}")
