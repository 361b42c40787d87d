from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..board.web import current_user, json_errors, login_required
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    @json_errors
    def login():
        data = request.get_json(silent=True) or request.form.to_dict()
        username = data.get("username", "")
        password = data.get("password", "")
        remember = bool(data.get("remember_me"))

        s_user = container.auth_service.authenticate(username, password)

        session.clear()
        session.permanent = remember
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
        session.update(s_user.to_session())

        logger.info("user %s signed in (agency=%s)", s_user.user_id, s_user.agency_id)
        return jsonify({"user": s_user.to_session()})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"message": "Signed out"})

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        user = current_user()
        return jsonify({"user": user.to_session(), "can_delete_projects": user.can_delete_projects})
