from presence.result_types import PresenceStatus, StatusKind
from presence.rotation import is_rotation_day_off
from presence.rules.base import StatusRule, StatusQuery


class RotationRule(StatusRule):
    """Rotation day off for collaborators on a rotation cycle"""

    order = 40
    name = "Rotation"

    def evaluate(self, query: StatusQuery):
        c = query.collaborator
        if not c.has_rotation:
            return None
        if is_rotation_day_off(
            query.day,
            c.rotation_reference_date,
            cycle_weeks=self.cfg.ROTATION_CYCLE_WEEKS,
            anchor_weekday=self.cfg.ROTATION_ANCHOR_WEEKDAY,
        ):
            return PresenceStatus(
                StatusKind.ROTATION_OFF,
                False,
                label=self.setting("label", "Rotation day off"),
            )
        return None
