import logging
from sqlalchemy import event
from sqlalchemy.orm.attributes import NO_VALUE

from .. import models

logger = logging.getLogger(__name__)

_LISTENERS: dict = {}


def _label(value):  # noqa: ANN001
    return getattr(value, "value", value)


def _listener_factory(model_name: str):
    """Return a SQLAlchemy attribute listener that logs status changes."""

    def _status_change(target, value, oldvalue, initiator):  # noqa: ANN001
        if oldvalue is NO_VALUE or oldvalue is None or _label(oldvalue) == _label(value):
            return value
        logger.info(
            "%s id=%s status changed from %s to %s",
            model_name,
            getattr(target, "id", "unknown"),
            _label(oldvalue),
            _label(value),
            extra={"tenant_id": getattr(target, "tenant_id", None)},
        )
        return value

    return _status_change


def register_status_listeners() -> None:
    """Attach listeners to quote and catalog product ``status`` columns once."""
    for model in (models.Quote, models.CatalogProduct):
        if model.__name__ in _LISTENERS:
            continue
        listener = _listener_factory(model.__name__)
        event.listen(
            model.status,  # type: ignore[arg-type]
            "set",
            listener,
            retval=False,
            propagate=True,
        )
        _LISTENERS[model.__name__] = listener
