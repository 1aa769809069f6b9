from presence.result_types import PresenceStatus, StatusKind
from presence.rules.base import StatusRule, StatusQuery
from presence.windows import is_shift_active_at


class ScheduleRule(StatusRule):
    """Normal weekly schedule"""

    order = 50
    name = "Schedule"

    def evaluate(self, query: StatusQuery):
        if is_shift_active_at(query.collaborator.schedule, query.instant):
            return PresenceStatus(
                StatusKind.WORKING, True, label=self.setting("label", "Working")
            )
        return None
