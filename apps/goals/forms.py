# apps/goals/forms.py
from django import forms


class GoalForm(forms.Form):
    """Tylko parsowanie typów; reguły (puste pola, termin w przyszłości) sprawdza use case."""
    name = forms.CharField(max_length=200, required=False, strip=False)
    description = forms.CharField(required=False, strip=False)
    due_date = forms.DateTimeField(required=False)
    category_id = forms.IntegerField(required=False, min_value=1)


class CategoryForm(forms.Form):
    name = forms.CharField(max_length=100, required=False, strip=False)
