# apps/core/errors.py
from typing import Optional


class GoalTrackerError(Exception):
    """Bazowy wyjątek aplikacji."""


class ValidationError(GoalTrackerError):
    """Błędne dane od użytkownika (puste pole, zła data, ujemna liczba)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AuthError(GoalTrackerError):
    """Brak zalogowanego użytkownika dla operacji, która go wymaga."""


class StoreError(GoalTrackerError):
    """Nieudane wywołanie magazynu danych (sieć, ograniczenia bazy itp.)."""


class NotFoundError(StoreError):
    def __init__(self, collection: str, record_id):
        super().__init__(f"{collection} record {record_id} not found")
        self.collection = collection
        self.record_id = record_id
