from eato.infra.database import DatabaseManager
from eato.infra.event_bus import get_event_bus
from eato.services.posts.repository import PostRepository
from eato.services.posts.service import PostService
from eato.services.trucks.dependencies import get_truck_repository


def get_post_repository() -> PostRepository:
    return PostRepository(DatabaseManager())


def get_post_service() -> PostService:
    return PostService(get_post_repository(), get_truck_repository(), get_event_bus())
