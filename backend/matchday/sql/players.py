from heliclockter import datetime_utc

from matchday.database import database
from matchday.models.db.player import Player, PlayerStatField
from matchday.utils.id_types import CompetitionId, PlayerId, TeamId
from matchday.utils.types import assert_some


async def sql_create_player(
    name: str, team_id: TeamId | None = None, position: str | None = None
) -> Player:
    query = """
        INSERT INTO players (name, team_id, position, created)
        VALUES (:name, :team_id, :position, :created)
        RETURNING *
    """
    result = await database.fetch_one(
        query=query,
        values={
            "name": name,
            "team_id": team_id,
            "position": position,
            "created": datetime_utc.now(),
        },
    )
    return Player.model_validate(dict(assert_some(result)._mapping))


async def sql_apply_player_stat_delta(
    player_id: PlayerId,
    stat_field: PlayerStatField,
    count: int,
    competition_id: CompetitionId | None = None,
) -> None:
    """
    Add `count` to one counter of the player's general record and, for competition
    fixtures, to the same counter of their per-competition record.
    """
    # Column names come from the PlayerStatField enum, never from user input.
    column = stat_field.column_name
    async with database.transaction():
        await database.execute(
            f"UPDATE players SET {column} = {column} + :count WHERE id = :player_id",
            values={"player_id": player_id, "count": count},
        )
        if competition_id is None:
            return

        await database.execute(
            f"""
            INSERT INTO player_competition_stats (player_id, competition_id, {column})
            VALUES (:player_id, :competition_id, :count)
            ON CONFLICT (player_id, competition_id)
            DO UPDATE
            SET {column} = player_competition_stats.{column} + EXCLUDED.{column}
            """,
            values={"player_id": player_id, "competition_id": competition_id, "count": count},
        )
