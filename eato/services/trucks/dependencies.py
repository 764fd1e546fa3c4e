from eato.infra.database import DatabaseManager
from eato.services.subscriptions.dependencies import get_subscription_service
from eato.services.trucks.repository import TruckRepository
from eato.services.trucks.service import TruckService


def get_truck_repository() -> TruckRepository:
    return TruckRepository(DatabaseManager())


def get_truck_service() -> TruckService:
    return TruckService(get_truck_repository(), get_subscription_service())
