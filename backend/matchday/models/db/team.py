from heliclockter import datetime_utc

from matchday.models.db.shared import BaseModelORM
from matchday.utils.id_types import TeamId


class TeamInsertable(BaseModelORM):
    name: str
    shorthand: str | None = None
    created: datetime_utc


class Team(TeamInsertable):
    id: TeamId
