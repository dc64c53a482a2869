"""Audited create/update/delete used by the domain helpers.

Each write is logged on the ``app`` category with the model and actor in the
log context, and recorded as one ``audit`` event.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError

from nextdoor.errors import ConflictError
from nextdoor.extensions import db
from nextdoor.security_utils import audit_log
from nextdoor.utils.logging_utils import get_logger, log_context

ModelType = TypeVar("ModelType", bound=db.Model)

REDACTED = "***REDACTED***"
_SECRET_MARKERS = ("password", "secret", "token", "key", "credential")


def _serialize_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _redact(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        name: REDACTED if any(marker in name.lower() for marker in _SECRET_MARKERS) else _serialize_value(value)
        for name, value in fields.items()
    }


def _target_id(instance) -> Optional[str]:
    pk = getattr(instance, "id", None)
    return None if pk is None else str(pk)


def _save(commit: bool) -> None:
    if commit:
        db.session.commit()
    else:
        db.session.flush()


def _record(event_name: str, actor_id: Optional[Any], **detail: Any) -> None:
    audit_log(
        event_name,
        user_id=None if actor_id is None else str(actor_id),
        detail=json.dumps(detail, default=_serialize_value),
    )


def _scope(instance_or_cls, action: str, actor_id: Optional[Any]):
    name = instance_or_cls.__name__ if isinstance(instance_or_cls, type) else type(instance_or_cls).__name__
    fields = {"model": name, "action": action}
    if actor_id is not None:
        fields["actor_id"] = str(actor_id)
    return name, log_context(**fields)


def create_instance(
    model_cls: Type[ModelType],
    commit: bool = True,
    *,
    actor_id: Optional[Any] = None,
    event_name: Optional[str] = None,
    conflict_message: Optional[str] = None,
    conflict_title: Optional[str] = None,
    **attributes: Any,
) -> ModelType:
    """Insert a row built from ``attributes``.

    With ``conflict_message`` set, a unique-constraint violation is rolled back
    and raised as ``ConflictError`` instead of propagating.
    """
    logger = get_logger("app")
    shown = _redact(attributes)
    name, scope = _scope(model_cls, "create", actor_id)
    with scope:
        instance = model_cls(**attributes)
        db.session.add(instance)
        try:
            _save(commit)
        except IntegrityError:
            db.session.rollback()
            if conflict_message is None:
                logger.exception("Insert of %s failed attributes=%s", name, shown)
                raise
            logger.info("Duplicate %s attributes=%s", name, shown)
            raise ConflictError(conflict_message, title=conflict_title)

        _record(event_name or f"{name.lower()}.create", actor_id,
                model=name, target_id=_target_id(instance), attributes=shown)
        logger.info("Created %s id=%s", name, _target_id(instance))
        return instance


def update_instance(
    instance: ModelType,
    commit: bool = True,
    *,
    actor_id: Optional[Any] = None,
    event_name: Optional[str] = None,
    **attributes: Any,
) -> ModelType:
    logger = get_logger("app")
    previous = _redact({field: getattr(instance, field, None) for field in attributes})
    name, scope = _scope(instance, "update", actor_id)
    with scope:
        for field, value in attributes.items():
            setattr(instance, field, value)
        try:
            _save(commit)
        except Exception:
            db.session.rollback()
            logger.exception("Update of %s id=%s failed", name, _target_id(instance))
            raise

        _record(event_name or f"{name.lower()}.update", actor_id,
                model=name, target_id=_target_id(instance), before=previous, after=_redact(attributes))
        logger.info("Updated %s id=%s", name, _target_id(instance))
        return instance


def delete_instance(
    instance: Optional[ModelType],
    commit: bool = True,
    *,
    actor_id: Optional[Any] = None,
    event_name: Optional[str] = None,
) -> bool:
    """Remove ``instance``. False when it is None."""
    if instance is None:
        return False
    logger = get_logger("app")
    target = _target_id(instance)
    name, scope = _scope(instance, "delete", actor_id)
    with scope:
        db.session.delete(instance)
        try:
            _save(commit)
        except Exception:
            db.session.rollback()
            logger.exception("Delete of %s id=%s failed", name, target)
            raise

        _record(event_name or f"{name.lower()}.delete", actor_id, model=name, target_id=target)
        logger.info("Deleted %s id=%s", name, target)
        return True
