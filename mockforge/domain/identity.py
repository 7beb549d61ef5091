from __future__ import annotations

from pydantic import BaseModel


class Principal(BaseModel):
    # Authenticated requester identity threaded explicitly into every service call.
    user_id: str
    api_key_id: str
    auth_method: str = "api_key"
