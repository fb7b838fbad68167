from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class TodoCreate(BaseModel):
    task: str


class TodoResponse(BaseModel):
    id: int
    task: str
    is_completed: bool
    user_id: str
    team_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TodoStats(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0

    def add(self, is_completed: bool) -> None:
        self.total += 1
        if is_completed:
            self.completed += 1
        else:
            self.pending += 1
