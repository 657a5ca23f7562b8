import django_filters
from .models import Todo


class TodoFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(lookup_expr='icontains', label="Name contains")
    priority = django_filters.ChoiceFilter(choices=Todo.PriorityChoices.choices, label="Priority")
    completed = django_filters.BooleanFilter(label="Completed")
    due_before = django_filters.IsoDateTimeFilter(field_name='due_date', lookup_expr='lte', label="Due before")
    estimated_max = django_filters.NumberFilter(
        field_name='estimated_time',  # estimated_time <= wartość
        lookup_expr='lte',
        label="Max time (min)"
    )

    class Meta:
        model = Todo
        fields = ['goal']
