from heliclockter import datetime_utc

from matchday.database import database
from matchday.models.db.team import Team
from matchday.utils.id_types import TeamId
from matchday.utils.types import assert_some


async def sql_create_team(name: str, shorthand: str | None = None) -> Team:
    query = """
        INSERT INTO teams (name, shorthand, created)
        VALUES (:name, :shorthand, :created)
        RETURNING *
    """
    result = await database.fetch_one(
        query=query,
        values={"name": name, "shorthand": shorthand, "created": datetime_utc.now()},
    )
    return Team.model_validate(dict(assert_some(result)._mapping))


async def sql_get_team(team_id: TeamId) -> Team | None:
    query = "SELECT * FROM teams WHERE id = :team_id"
    result = await database.fetch_one(query=query, values={"team_id": team_id})
    return Team.model_validate(dict(result._mapping)) if result is not None else None
