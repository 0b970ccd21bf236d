# shared/common/mixins.py
"""
Reusable Model Mixins
"""

from django.db import models
from django.db.models import F
from django.utils import timezone
from typing import Any


class TimestampMixin(models.Model):
    """Adds ``created_at`` and ``updated_at``."""

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ActiveMixin(models.Model):
    """Soft on/off switch; inactive rows stay referenced but are hidden from listings."""

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        abstract = True


class VersionedMixin(models.Model):
    """
    Optimistic locking on a ``version`` column.

    Plain ``save()`` bumps the version. ``update_if_current`` is the
    race-safe write: it issues ``UPDATE ... WHERE version = <loaded>`` and
    reports whether this writer won.
    """

    version = models.PositiveIntegerField(default=1)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if self.pk:
            self.version += 1
        super().save(*args, **kwargs)

    def update_if_current(self, **fields: Any) -> bool:
        if 'updated_at' in {f.name for f in self._meta.concrete_fields}:
            fields.setdefault('updated_at', timezone.now())

        won = type(self)._default_manager.filter(
            pk=self.pk,
            version=self.version,
        ).update(version=F('version') + 1, **fields)

        if won:
            self.refresh_from_db()
        return bool(won)
