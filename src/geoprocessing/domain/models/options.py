from enum import Enum

from pydantic import BaseModel, Field


class ExecutionMode(str, Enum):
    SYNC = "sync"
    ASYNC = "async"


class GeoprocessingHandlerOptions(BaseModel):
    title: str = Field(description="Service name; also the first half of every task key.")
    description: str = Field(default="", description="Human-readable summary.")
    execution_mode: ExecutionMode = Field(
        default=ExecutionMode.SYNC,
        description="Run in the entry invocation, or hand off to the async worker.",
    )
