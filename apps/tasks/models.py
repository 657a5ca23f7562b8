# apps/tasks/models.py
from django.db import models
from apps.tasks.domain.entities import Priority


class Todo(models.Model):
    goal = models.ForeignKey('goals.Goal', on_delete=models.CASCADE, related_name='todos')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')

    # TextChoices dla Admina, mapowane na Enum domenowy
    class PriorityChoices(models.TextChoices):
        LOW = Priority.LOW.value, 'Low'
        MEDIUM = Priority.MEDIUM.value, 'Medium'
        HIGH = Priority.HIGH.value, 'High'

    priority = models.CharField(
        max_length=10,
        choices=PriorityChoices.choices,
        null=True, blank=True
    )

    # Czas
    due_date = models.DateTimeField(null=True, blank=True)
    estimated_time = models.PositiveIntegerField(null=True, blank=True, help_text="Szacowany czas w minutach")

    completed = models.BooleanField(default=False)
    completed_time = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['completed', 'completed_time'], name='todo_completed_time_idx'),
        ]

    def __str__(self):
        return self.name
