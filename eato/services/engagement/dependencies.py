from eato.infra.database import DatabaseManager
from eato.services.engagement.repository import EngagementRepository
from eato.services.engagement.service import EngagementService
from eato.services.trucks.dependencies import get_truck_repository


def get_engagement_repository() -> EngagementRepository:
    return EngagementRepository(DatabaseManager())


def get_engagement_service() -> EngagementService:
    return EngagementService(get_engagement_repository(), get_truck_repository())
