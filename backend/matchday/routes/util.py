from fastapi import Header

from matchday.utils.id_types import UserId


async def actor_id_dependency(x_actor_id: int | None = Header(default=None)) -> UserId | None:
    """The acting user is only recorded in the audit log, it grants nothing."""
    return UserId(x_actor_id) if x_actor_id is not None else None
