# apps/tasks/domain/entities.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Priority(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


@dataclass
class TodoEntity:
    id: Optional[int]  # None przed zapisem
    goal_id: int
    name: str
    description: str = ""
    priority: Optional[Priority] = None

    # Czas
    due_date: Optional[datetime] = None
    estimated_time: Optional[int] = None  # minuty

    # Ukończenie: completed_time jest ustawione wtedy i tylko wtedy, gdy completed
    completed: bool = False
    completed_time: Optional[datetime] = None

    created_at: Optional[datetime] = None

    # Z relacji (tylko do odczytu, np. oś czasu)
    goal_name: Optional[str] = None

    def mark_completed(self, now: datetime):
        self.completed = True
        self.completed_time = now

    def mark_incomplete(self):
        self.completed = False
        self.completed_time = None

    def toggle(self, now: datetime):
        """Incomplete -> Complete (ze znacznikiem czasu) i z powrotem."""
        if self.completed:
            self.mark_incomplete()
        else:
            self.mark_completed(now)
