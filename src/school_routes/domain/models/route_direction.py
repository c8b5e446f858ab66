"""Route direction enum."""

from enum import Enum

from school_routes.domain.models.anchor_role import AnchorRole


class RouteDirection(Enum):
    """Direction of travel relative to the school.

    Values match the persisted ``route_type`` field.
    """

    TO_SCHOOL = "shift_start"
    FROM_SCHOOL = "shift_end"

    @property
    def pinned_role(self) -> AnchorRole:
        """The anchor that is fixed to the school location for this direction."""
        if self is RouteDirection.TO_SCHOOL:
            return AnchorRole.END
        return AnchorRole.START
