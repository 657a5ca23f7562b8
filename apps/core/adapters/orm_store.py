# apps/core/adapters/orm_store.py
import functools
import logging
from contextlib import contextmanager
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from django.apps import apps
from django.core.exceptions import FieldError, ObjectDoesNotExist
from django.db import DatabaseError, transaction
from django.db.models import Prefetch
from django.db.models.signals import post_delete, post_save

from apps.core.errors import NotFoundError, StoreError
from apps.core.ports.store import (
    CATEGORIES, GOALS, TODOS,
    ChangeAction, ChangeCallback, ChangeEvent, IRecordStore, Record, Unsubscribe,
    check_collection,
)

logger = logging.getLogger(__name__)

MODEL_LABELS = {
    CATEGORIES: ('goals', 'Category'),
    GOALS: ('goals', 'Goal'),
    TODOS: ('tasks', 'Todo'),
}

# Relacje do rozwinięcia: (typ, nazwa atrybutu w modelu)
RELATIONS = {
    GOALS: {'todos': 'many', 'category': 'one'},
    TODOS: {'goal': 'one'},
    CATEGORIES: {},
}


def to_record(obj) -> Record:
    """Model Django -> słownik (klucze to attname, np. goal_id)."""
    return {field.attname: getattr(obj, field.attname) for field in obj._meta.concrete_fields}


@contextmanager
def translate_errors(collection: str, record_id=None):
    try:
        yield
    except ObjectDoesNotExist as exc:
        raise NotFoundError(collection, record_id) from exc
    except (DatabaseError, FieldError) as exc:
        logger.warning("Store call on %s failed: %s", collection, exc)
        raise StoreError(str(exc)) from exc


class DjangoRecordStore(IRecordStore):
    """Magazyn oparty o ORM Django. Powiadomienia o zmianach z sygnałów post_save/post_delete."""

    def model_for(self, collection: str):
        app_label, model_name = MODEL_LABELS[check_collection(collection)]
        return apps.get_model(app_label, model_name)

    def _expanded_queryset(self, collection: str, qs, expand: Sequence[str]):
        relations = RELATIONS[collection]
        for name in expand:
            kind = relations.get(name)
            if kind is None:
                raise ValueError(f"Cannot expand '{name}' on {collection}")
            if kind == 'one':
                qs = qs.select_related(name)
            else:
                todo_model = self.model_for(TODOS)
                qs = qs.prefetch_related(
                    Prefetch(name, queryset=todo_model.objects.order_by('created_at', 'id'))
                )
        return qs

    def _to_expanded_record(self, obj, expand: Sequence[str]) -> Record:
        record = to_record(obj)
        for name in expand:
            related = getattr(obj, name)
            if hasattr(related, 'all'):
                record[name] = [to_record(item) for item in related.all()]
            else:
                record[name] = to_record(related) if related is not None else None
        return record

    def select(self, collection: str, filters: Optional[Mapping[str, Any]] = None,
               ordering: Optional[Sequence[str]] = None, limit: Optional[int] = None,
               expand: Iterable[str] = ()) -> List[Record]:
        expand = tuple(expand)
        model = self.model_for(collection)
        with translate_errors(collection):
            qs = model.objects.filter(**dict(filters or {}))
            if ordering:
                qs = qs.order_by(*ordering)
            qs = self._expanded_queryset(collection, qs, expand)
            if limit is not None:
                qs = qs[:limit]
            return [self._to_expanded_record(obj, expand) for obj in qs]

    def get(self, collection: str, record_id, expand: Iterable[str] = ()) -> Optional[Record]:
        expand = tuple(expand)
        model = self.model_for(collection)
        with translate_errors(collection, record_id):
            qs = self._expanded_queryset(collection, model.objects.filter(pk=record_id), expand)
            obj = qs.first()
            return self._to_expanded_record(obj, expand) if obj is not None else None

    def insert(self, collection: str, values: Mapping[str, Any]) -> Record:
        model = self.model_for(collection)
        with translate_errors(collection):
            obj = model.objects.create(**dict(values))
        logger.debug("Inserted %s #%s", collection, obj.pk)
        return to_record(obj)

    def update(self, collection: str, record_id, values: Mapping[str, Any]) -> Record:
        model = self.model_for(collection)
        with translate_errors(collection, record_id):
            obj = model.objects.get(pk=record_id)
            for field, value in values.items():
                setattr(obj, field, value)
            # save() zamiast queryset.update(), żeby poszedł sygnał post_save
            obj.save(update_fields=list(values))
        return to_record(obj)

    def delete(self, collection: str, record_id) -> None:
        model = self.model_for(collection)
        with translate_errors(collection, record_id):
            obj = model.objects.get(pk=record_id)
            obj.delete()
        logger.debug("Deleted %s #%s", collection, record_id)

    def atomic(self):
        return transaction.atomic()

    def subscribe(self, collection: str, callback: ChangeCallback) -> Unsubscribe:
        model = self.model_for(collection)

        def notify(event: ChangeEvent):
            try:
                callback(event)
            except Exception:
                # Błąd subskrybenta nie może cofnąć zapisu w bazie
                logger.exception("Change subscriber for %s failed", collection)

        # Dopiero po commicie; wycofana transakcja nie wysyła nic
        def on_save(sender, instance, created, **kwargs):
            action = ChangeAction.INSERT if created else ChangeAction.UPDATE
            event = ChangeEvent(collection, action, instance.pk)
            transaction.on_commit(functools.partial(notify, event))

        def on_delete(sender, instance, **kwargs):
            event = ChangeEvent(collection, ChangeAction.DELETE, instance.pk)
            transaction.on_commit(functools.partial(notify, event))

        post_save.connect(on_save, sender=model, weak=False)
        post_delete.connect(on_delete, sender=model, weak=False)

        def unsubscribe():
            post_save.disconnect(on_save, sender=model)
            post_delete.disconnect(on_delete, sender=model)

        return unsubscribe
