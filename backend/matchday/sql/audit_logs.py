import json
from typing import Any

from heliclockter import datetime_utc

from matchday.database import database
from matchday.utils.id_types import UserId


async def sql_insert_audit_log(
    *,
    actor_id: UserId | None,
    action: str,
    entity: str,
    entity_id: int,
    message: str,
    previous_values: Any = None,
    new_values: Any = None,
) -> None:
    query = """
        INSERT INTO audit_logs (
            actor_id, action, entity, entity_id, message, previous_values, new_values, created
        )
        VALUES (
            :actor_id, :action, :entity, :entity_id, :message,
            :previous_values, :new_values, :created
        )
    """
    await database.execute(
        query=query,
        values={
            "actor_id": actor_id,
            "action": action,
            "entity": entity,
            "entity_id": entity_id,
            "message": message,
            "previous_values": json.dumps(previous_values) if previous_values is not None else None,
            "new_values": json.dumps(new_values) if new_values is not None else None,
            "created": datetime_utc.now(),
        },
    )
