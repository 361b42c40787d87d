from __future__ import annotations

import logging
from functools import wraps

from flask import current_app, get_flashed_messages, jsonify, session

from ..core.constants import DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS
from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError, NotFoundError, ValidationError
from ..users.service import SessionUser
from .model import ViewState
from .notifier import FlashNotifier
from .state import ViewStateController

logger = logging.getLogger(__name__)

STATE_KEY = "board_state"


def current_user() -> SessionUser:
    return SessionUser.from_session(session)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session or "agency_id" not in session:
            return jsonify({"error": "Please sign in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def json_errors(view):
    """Map domain errors to JSON responses; anything unexpected is a 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except AuthenticationError as e:
            return jsonify({"error": str(e)}), 401
        except AuthorizationError as e:
            return jsonify({"error": str(e)}), 403
        except NotFoundError as e:
            return jsonify({"error": str(e)}), 404
        except DomainError as e:
            logger.warning("request failed: %s", e)
            return jsonify({"error": "Service temporarily unavailable"}), 503
        except Exception:
            logger.exception("unexpected error")
            return jsonify({"error": "Internal server error"}), 500

    return wrapper


def _initial_state() -> ViewState:
    page_size = int(current_app.config.get("PROJECT_PAGE_SIZE") or DEFAULT_PAGE_SIZE)
    return ViewState(page_size=page_size if page_size in PAGE_SIZE_OPTIONS else DEFAULT_PAGE_SIZE)


def open_board(container, *, load_views: bool = True) -> ViewStateController:
    """Controller for the signed-in user, restored from the session and freshly fetched."""
    raw = session.get(STATE_KEY)
    state = ViewState.from_dict(raw) if raw else _initial_state()

    board = ViewStateController(
        user=current_user(),
        projects=container.project_service,
        saved_views=container.saved_views_repo,
        favorites=container.favorites_repo,
        notifier=FlashNotifier(),
        selections=container.selections_repo,
        state=state,
    )
    board.load_selection()
    board.refresh()
    if load_views:
        board.load_saved_views()
    return board


def save_board(board: ViewStateController) -> None:
    board.persist_selection()
    session[STATE_KEY] = board.state.to_session()


def notifications() -> list[dict]:
    return [{"category": c, "message": m} for c, m in get_flashed_messages(with_categories=True)]


def board_response(board: ViewStateController, status: int = 200, **extra):
    save_board(board)
    payload = board.board_payload()
    payload.update(extra)
    payload["notifications"] = notifications()
    return jsonify(payload), status
