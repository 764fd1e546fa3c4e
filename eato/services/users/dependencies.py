from eato.infra.database import DatabaseManager
from eato.services.users.repository import UserRepository
from eato.services.users.service import UserService


def get_database() -> DatabaseManager:
    return DatabaseManager()


def get_user_repository() -> UserRepository:
    return UserRepository(get_database())


def get_user_service() -> UserService:
    return UserService(get_user_repository())
