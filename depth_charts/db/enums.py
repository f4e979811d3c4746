# db/enums.py
import enum

class Capability(enum.StrEnum):
    VIEW_CHART = "depth_chart_view"
    CREATE_CHART = "depth_chart_create"
    EDIT_CHART = "depth_chart_edit"
    DELETE_CHART = "depth_chart_delete"
    MANAGE_POSITIONS = "depth_chart_manage_positions"
    ASSIGN_PLAYERS = "depth_chart_assign_players"
    UNASSIGN_PLAYERS = "depth_chart_unassign_players"

class PlayerStatus(enum.StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    GRADUATED = "graduated"
    TRANSFERRED = "transferred"

class SchoolType(enum.StrEnum):
    HS = "HS"
    COLL = "COLL"

class ChartAction(enum.StrEnum):
    CREATED = "depth_chart.created"
    UPDATED = "depth_chart.updated"
    DELETED = "depth_chart.deleted"
    DUPLICATED = "depth_chart.duplicated"
    POSITION_ADDED = "position.added"
    POSITION_UPDATED = "position.updated"
    POSITION_DELETED = "position.deleted"
    PLAYER_ASSIGNED = "player.assigned"
    PLAYER_UNASSIGNED = "player.unassigned"
