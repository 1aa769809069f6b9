from presence.result_types import PresenceStatus, StatusKind
from presence.rules.base import StatusRule, StatusQuery


class VacationRule(StatusRule):
    """Approved vacation covering the date"""

    order = 10
    name = "Vacation"

    def evaluate(self, query: StatusQuery):
        for v in query.vacations:
            if v.approved and v.covers(query.day):
                return PresenceStatus(
                    StatusKind.VACATION, False, label=self.setting("label", "Vacation")
                )
        return None
