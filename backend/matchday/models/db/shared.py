import json
from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseModelORM(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def parse_json_column(value: Any) -> Any:
    """
    asyncpg hands JSON columns back as text when queried through raw SQL,
    so decode them before pydantic validates the nested models.
    """
    if isinstance(value, str | bytes):
        return json.loads(value)
    return value
