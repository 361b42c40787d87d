from __future__ import annotations

from flask import Flask, Response, request

from ..board.web import board_response, json_errors, login_required, open_board, save_board
from ..container import Container
from ..core.exceptions import ValidationError
from .export import export_filename


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        data = request.get_json(silent=True)
        if data is None:
            data = request.form.to_dict()
        if not isinstance(data, dict):
            raise ValidationError("Expected a JSON object")
        return data

    @app.route("/api/projects", methods=["GET"], endpoint="projects_board")
    @login_required
    @json_errors
    def board():
        b = open_board(container)
        return board_response(b)

    @app.route("/api/projects", methods=["POST"], endpoint="projects_create")
    @login_required
    @json_errors
    def create_project():
        b = open_board(container, load_views=False)
        project = b.create_project(_body())
        if project is None:
            return board_response(b, 400)
        return board_response(b, 201, created_id=project.project_id)

    @app.route("/api/projects/<project_id>", methods=["PATCH"], endpoint="projects_update")
    @login_required
    @json_errors
    def update_project(project_id: str):
        b = open_board(container, load_views=False)
        project = b.update_project(project_id, _body())
        return board_response(b, 200 if project else 400)

    @app.route("/api/projects/<project_id>", methods=["DELETE"], endpoint="projects_delete")
    @login_required
    @json_errors
    def delete_project(project_id: str):
        b = open_board(container, load_views=False)
        ok = b.delete_project(project_id)
        return board_response(b, 200 if ok else 400)

    @app.route("/api/projects/<project_id>/archive", methods=["POST"], endpoint="projects_archive")
    @login_required
    @json_errors
    def archive_project(project_id: str):
        b = open_board(container, load_views=False)
        ok = b.archive_project(project_id)
        return board_response(b, 200 if ok else 400)

    @app.route("/api/projects/<project_id>/duplicate", methods=["POST"], endpoint="projects_duplicate")
    @login_required
    @json_errors
    def duplicate_project(project_id: str):
        b = open_board(container, load_views=False)
        copy = b.duplicate_project(project_id)
        if copy is None:
            return board_response(b, 400)
        return board_response(b, 201, created_id=copy.project_id)

    @app.route("/api/projects/<project_id>/status", methods=["POST"], endpoint="projects_move")
    @login_required
    @json_errors
    def move_project(project_id: str):
        """Kanban drop: move the card into another status column."""
        b = open_board(container, load_views=False)
        moved = b.move_project(project_id, _body().get("status"))
        return board_response(b, moved=moved)

    @app.route("/api/projects/bulk/status", methods=["POST"], endpoint="projects_bulk_status")
    @login_required
    @json_errors
    def bulk_status():
        b = open_board(container, load_views=False)
        result = b.bulk_status_change(_body().get("status"))
        return board_response(b, bulk=result.to_dict())

    @app.route("/api/projects/bulk/delete", methods=["POST"], endpoint="projects_bulk_delete")
    @login_required
    @json_errors
    def bulk_delete():
        b = open_board(container, load_views=False)
        result = b.bulk_delete()
        return board_response(b, bulk=result.to_dict())

    @app.route("/api/projects/export.csv", methods=["GET"], endpoint="projects_export")
    @login_required
    @json_errors
    def export_csv():
        b = open_board(container, load_views=False)
        save_board(b)
        return Response(
            b.export_csv(),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={export_filename(b.today)}"},
        )
