from enum import auto
from typing import Any

from matchday.sql.audit_logs import sql_insert_audit_log
from matchday.utils.id_types import UserId
from matchday.utils.logging import logger
from matchday.utils.types import EnumAutoStr


class AuditAction(EnumAutoStr):
    CREATE = auto()
    UPDATE = auto()
    DELETE = auto()


async def log_action(
    *,
    actor_id: UserId | None,
    action: AuditAction,
    entity: str,
    entity_id: int,
    message: str,
    previous_values: Any = None,
    new_values: Any = None,
) -> None:
    """Best-effort audit trail, a failed insert never fails the audited operation."""
    try:
        await sql_insert_audit_log(
            actor_id=actor_id,
            action=action.value,
            entity=entity,
            entity_id=entity_id,
            message=message,
            previous_values=previous_values,
            new_values=new_values,
        )
    except Exception as exc:
        logger.warning(f"Could not write audit log for {entity} {entity_id}: {exc}")
