from typing import Literal
from pydantic import BaseModel, Field, model_validator

class IntentIn(BaseModel):
    """Intent request schema."""
    kind: Literal["move", "shoot", "reload"]
    dx: int = Field(default=0, ge=-1, le=1)
    dy: int = Field(default=0, ge=-1, le=1)

    @model_validator(mode="after")
    def check_step(self) -> "IntentIn":
        """Moves are a single up, down, left or right step."""
        if self.kind == "move" and abs(self.dx) + abs(self.dy) != 1:
            raise ValueError("move must be one orthogonal step")
        return self

class KeyIn(BaseModel):
    """Raw key press schema."""
    key: str

class TapIn(BaseModel):
    """Board tap schema."""
    x: int
    y: int

class IntentResult(BaseModel):
    """Outcome of an intent submission."""
    accepted: bool
    events: int

class EventsResponse(BaseModel):
    """Events response schema."""
    next_offset: int
    events: list[dict]
