from enum import auto

from heliclockter import datetime_utc
from pydantic import BaseModel

from matchday.models.db.shared import BaseModelORM
from matchday.utils.id_types import PlayerId, TeamId
from matchday.utils.types import EnumAutoStr


class PlayerStatField(EnumAutoStr):
    APPEARANCES = auto()
    GOALS = auto()
    OWN_GOALS = auto()
    ASSISTS = auto()
    YELLOW_CARDS = auto()
    RED_CARDS = auto()
    CLEAN_SHEETS = auto()

    @property
    def column_name(self) -> str:
        return self.value.lower()


class PlayerInsertable(BaseModelORM):
    name: str
    team_id: TeamId | None = None
    position: str | None = None
    created: datetime_utc


class Player(PlayerInsertable):
    id: PlayerId
    appearances: int = 0
    goals: int = 0
    own_goals: int = 0
    assists: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    clean_sheets: int = 0


class PlayerStatDelta(BaseModel):
    player_id: PlayerId
    stat_field: PlayerStatField
    count: int
