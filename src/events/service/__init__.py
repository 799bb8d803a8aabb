import typing as t

import structlog
from django.db import models, transaction
from pydantic import BaseModel

T = t.TypeVar("T", bound=models.Model)

logger = structlog.get_logger(__name__)


@transaction.atomic
def update_db_instance(instance: T, payload: BaseModel | None = None, **kwargs: t.Any) -> T:
    """Apply a partial edit under a row lock.

    Fields left out of the payload, or sent as null, keep their stored value.
    Only the edited columns are written.
    """
    instance = instance.__class__.objects.select_for_update().get(pk=instance.pk)  # type: ignore[attr-defined]
    data = payload.model_dump(exclude_unset=True, exclude_none=True) if payload else {}
    data.update(kwargs)
    if not data:
        return instance
    for key, value in data.items():
        setattr(instance, key, value)
    instance.save(update_fields=[*data, "updated_at"])
    logger.info("instance_updated", model=instance._meta.label, pk=str(instance.pk), fields=sorted(data))
    return instance
