from __future__ import annotations

from dataclasses import dataclass

from .board.mysql_favorite_repository import MySQLFavoriteRepository
from .board.mysql_saved_view_repository import MySQLSavedViewRepository
from .board.mysql_selection_repository import MySQLSelectionRepository
from .database.connection import DBConfig, DatabaseConnection
from .projects.mysql_client_repository import MySQLClientRepository
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.service import ProjectService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    projects_repo: MySQLProjectRepository
    clients_repo: MySQLClientRepository
    saved_views_repo: MySQLSavedViewRepository
    favorites_repo: MySQLFavoriteRepository
    selections_repo: MySQLSelectionRepository

    auth_service: AuthService
    project_service: ProjectService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    projects_repo = MySQLProjectRepository(conn)
    clients_repo = MySQLClientRepository(conn)

    return Container(
        conn=conn,
        users_repo=users_repo,
        projects_repo=projects_repo,
        clients_repo=clients_repo,
        saved_views_repo=MySQLSavedViewRepository(conn),
        favorites_repo=MySQLFavoriteRepository(conn),
        selections_repo=MySQLSelectionRepository(conn),
        auth_service=AuthService(users_repo),
        project_service=ProjectService(projects_repo, clients_repo),
    )
