# apps/tasks/forms.py
from django import forms
from .models import Todo


class TodoForm(forms.Form):
    goal_id = forms.IntegerField(required=False, min_value=1)
    name = forms.CharField(max_length=200, required=False, strip=False)
    description = forms.CharField(required=False)
    priority = forms.ChoiceField(choices=[('', '---')] + Todo.PriorityChoices.choices, required=False)
    due_date = forms.DateTimeField(required=False)
    # Bez min_value: ujemną wartość odrzuca use case (ValidationError)
    estimated_time = forms.IntegerField(required=False)

    EDITABLE = ('name', 'description', 'priority', 'due_date', 'estimated_time')

    def changes(self, submitted):
        """Pola przesłane w żądaniu -> argumenty dla UpdateTodoInput."""
        return {name: self.cleaned_data[name] for name in self.EDITABLE if name in submitted}
