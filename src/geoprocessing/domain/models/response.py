import json
from typing import Any

from pydantic import BaseModel, Field

COMMON_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
}
CACHE_HEADER = "x-gp-cache"
CACHE_HIT = "Cache hit"


class HandlerResponse(BaseModel):
    status_code: int = Field(description="HTTP-style status code.")
    headers: dict[str, str] = Field(default_factory=dict)
    body: str = Field(default="", description="JSON-serialized task, or empty.")

    def json_body(self) -> Any:
        return json.loads(self.body) if self.body else None
