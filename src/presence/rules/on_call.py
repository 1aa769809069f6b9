from presence.result_types import PresenceStatus, StatusKind
from presence.rules.base import StatusRule, StatusQuery
from presence.windows import is_time_in_window


class OnCallRule(StatusRule):
    """On-call record whose dates and time window contain the instant"""

    order = 20
    name = "OnCall"

    def evaluate(self, query: StatusQuery):
        for oc in query.on_calls:
            if oc.covers(query.day) and is_time_in_window(
                oc.start_time, oc.end_time, query.instant
            ):
                return PresenceStatus(
                    StatusKind.ON_CALL, True, label=self.setting("label", "On call")
                )
        return None
