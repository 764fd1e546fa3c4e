from typing import Optional

from eato.shared.errors import Forbidden
from eato.shared.models.enums import UserRole


class RoleStateMachine:
    """
    A marketplace role is chosen once.
    Unset (None) and the neutral USER role may move to either side;
    TRUCK_OWNER and EVENT_ORGANIZER are terminal.
    """

    ALLOWED_TRANSITIONS = {
        None: [UserRole.TRUCK_OWNER, UserRole.EVENT_ORGANIZER, UserRole.USER],
        UserRole.USER: [UserRole.TRUCK_OWNER, UserRole.EVENT_ORGANIZER],
        UserRole.TRUCK_OWNER: [],
        UserRole.EVENT_ORGANIZER: [],
    }

    @staticmethod
    def can_transition(current_role: Optional[str], new_role: str) -> bool:
        try:
            curr = UserRole(current_role) if current_role is not None else None
            new = UserRole(new_role)
        except ValueError:
            return False
        if curr == new:
            return True
        return new in RoleStateMachine.ALLOWED_TRANSITIONS.get(curr, [])

    @staticmethod
    def apply(current_role: Optional[UserRole], requested_role: Optional[str]) -> Optional[UserRole]:
        """
        Returns the role to persist for a profile update.

        Raises:
            Forbidden: the role is already set to a different value
        """
        if requested_role is None:
            return current_role
        if not RoleStateMachine.can_transition(current_role, requested_role):
            raise Forbidden(f"Role is already set to '{current_role}' and cannot be changed")
        return UserRole(requested_role)
