from eato.common.logger import log_error, log_info
from eato.common.constants import TypeMsg
from eato.infra.event_bus import DomainEvent, EventBus, EventTypes
from eato.services.posts.repository import PostRepository
from eato.services.trucks.repository import TruckRepository
from eato.shared.errors import Forbidden, NotFound
from eato.shared.models.engagement_dto import (
    CreateScheduleRequest,
    CreateTruckUpdateRequest,
    ScheduleDTO,
    TruckUpdateDTO,
)


class PostService:
    def __init__(self, repository: PostRepository, trucks: TruckRepository, event_bus: EventBus):
        self.repository = repository
        self.trucks = trucks
        self.event_bus = event_bus

    async def _require_owner(self, truck_id: str, user_id: str) -> None:
        truck = await self.trucks.get_truck_by_id(truck_id)
        if not truck:
            raise NotFound.entity("Truck")
        if truck.owner_id != user_id:
            raise Forbidden("You do not own this truck")

    async def list_schedules(self, truck_id: str) -> list[ScheduleDTO]:
        return await self.repository.list_schedules(truck_id)

    async def create_schedule(self, user_id: str, request: CreateScheduleRequest) -> ScheduleDTO:
        await self._require_owner(request.truck_id, user_id)
        return await self.repository.create_schedule(request)

    async def delete_schedule(self, schedule_id: str, user_id: str) -> None:
        schedule = await self.repository.get_schedule(schedule_id)
        if not schedule:
            raise NotFound.entity("Schedule")
        await self._require_owner(schedule.truck_id, user_id)
        await self.repository.delete_schedule(schedule_id)

    async def list_updates(self, truck_id: str) -> list[TruckUpdateDTO]:
        return await self.repository.list_updates(truck_id)

    async def create_update(self, user_id: str, request: CreateTruckUpdateRequest) -> TruckUpdateDTO:
        await self._require_owner(request.truck_id, user_id)
        update = await self.repository.create_update(request)
        await log_info(f"Update {update.id} posted for truck {update.truck_id}", type_msg=TypeMsg.INFO)

        try:
            await self.event_bus.publish(
                DomainEvent(
                    event_type=EventTypes.TRUCK_UPDATE_POSTED,
                    payload={"update_id": update.id, "truck_id": update.truck_id},
                )
            )
        except Exception as e:
            await log_error(f"Failed to queue follower alerts for update {update.id}: {e}", exc_info=True)
        return update

    async def delete_update(self, update_id: str, user_id: str) -> None:
        update = await self.repository.get_update(update_id)
        if not update:
            raise NotFound.entity("Update")
        await self._require_owner(update.truck_id, user_id)
        await self.repository.delete_update(update_id)
