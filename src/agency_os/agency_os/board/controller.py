from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import NotFoundError
from .web import board_response, json_errors, login_required, notifications, open_board, save_board


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        return request.get_json(silent=True) or {}

    # -- selection ---------------------------------------------------------

    @app.route("/api/projects/<project_id>/select", methods=["POST"], endpoint="board_toggle_selection")
    @login_required
    @json_errors
    def toggle_selection(project_id: str):
        board = open_board(container, load_views=False)
        board.toggle_selection(project_id)
        return board_response(board)

    @app.route("/api/projects/selection/all", methods=["POST"], endpoint="board_select_all")
    @login_required
    @json_errors
    def select_all():
        board = open_board(container, load_views=False)
        board.select_all()
        return board_response(board)

    @app.route("/api/projects/selection/clear", methods=["POST"], endpoint="board_clear_selection")
    @login_required
    @json_errors
    def clear_selection():
        board = open_board(container, load_views=False)
        board.clear_selection()
        return board_response(board)

    # -- favorites ---------------------------------------------------------

    @app.route("/api/projects/<project_id>/favorite", methods=["POST"], endpoint="board_toggle_favorite")
    @login_required
    @json_errors
    def toggle_favorite(project_id: str):
        board = open_board(container, load_views=False)
        if board.load_error is None and all(p.project_id != project_id for p in board.projects):
            raise NotFoundError("Project not found")
        is_favorite = board.toggle_favorite(project_id)
        return board_response(board, is_favorite=is_favorite)

    # -- filters, view mode, pagination -----------------------------------

    @app.route("/api/projects/filters", methods=["POST"], endpoint="board_update_filters")
    @login_required
    @json_errors
    def update_filters():
        board = open_board(container, load_views=False)
        board.update_filters(_body())
        return board_response(board)

    @app.route("/api/projects/filters/clear", methods=["POST"], endpoint="board_clear_filters")
    @login_required
    @json_errors
    def clear_filters():
        board = open_board(container, load_views=False)
        board.clear_all_filters()
        return board_response(board)

    @app.route("/api/projects/view-mode", methods=["POST"], endpoint="board_view_mode")
    @login_required
    @json_errors
    def set_view_mode():
        board = open_board(container, load_views=False)
        board.set_view_mode(_body().get("view_mode"))
        return board_response(board)

    @app.route("/api/projects/page", methods=["POST"], endpoint="board_page")
    @login_required
    @json_errors
    def set_page():
        body = _body()
        board = open_board(container, load_views=False)
        if "page_size" in body:
            board.set_page_size(body["page_size"])
        if "page" in body:
            board.set_page(body["page"])
        return board_response(board)

    # -- saved views -------------------------------------------------------

    @app.route("/api/projects/views", methods=["GET"], endpoint="board_list_views")
    @login_required
    @json_errors
    def list_views():
        board = open_board(container)
        save_board(board)
        return jsonify(
            {
                "views": [v.to_dict() for v in board.state.saved_views],
                "current_view_id": board.state.to_dict()["current_view_id"],
                "notifications": notifications(),
            }
        )

    @app.route("/api/projects/views", methods=["POST"], endpoint="board_save_view")
    @login_required
    @json_errors
    def save_view():
        board = open_board(container)
        view = board.save_current_view(_body().get("name", ""))
        status = 201 if view else 400
        return board_response(board, status, view=view.to_dict() if view else None)

    @app.route("/api/projects/views/<view_id>/load", methods=["POST"], endpoint="board_load_view")
    @login_required
    @json_errors
    def load_view(view_id: str):
        board = open_board(container)
        if not board.load_saved_view(view_id):
            raise NotFoundError("Saved view not found")
        return board_response(board)

    @app.route("/api/projects/views/<view_id>", methods=["DELETE"], endpoint="board_delete_view")
    @login_required
    @json_errors
    def delete_view(view_id: str):
        board = open_board(container)
        ok = board.delete_saved_view(view_id)
        return board_response(board, 200 if ok else 404)
