"""
Structured event logging for imports and reconciliation.

Events are emitted through structlog with a fixed shape: a message, an
``event_code`` naming the event and, for warnings and errors, a ``reason`` and
a machine readable ``reason_code``. Domain objects passed as keyword
arguments are expanded into flat fields by extractors:

- ``job`` -> ``job_id``, ``folder_ref``
- ``item`` -> ``external_id``, ``item_name``
- ``image`` -> ``image_id``, ``source`` plus the ``item`` fields

    structured_logger = ImagehubLogger.get_logger(__name__)
    structured_logger.bind(job=job).warning(
        "Item import failed.",
        event_code="import_item_failed",
        reason=str(exc),
        reason_code="not_found",
        item=item,
    )

Explicit keyword values win over extracted ones and ``None`` values are
dropped.
"""

from types import MappingProxyType
from typing import Any, Callable, Optional

import structlog

Extractor = Callable[[Any], dict[str, Any]]


def _job_fields(job) -> dict[str, Any]:
    payload = getattr(job, "payload", None) or {}
    return {"job_id": getattr(job, "pk", None), "folder_ref": payload.get("folder_ref")}


def _item_fields(item) -> dict[str, Any]:
    return {
        "external_id": getattr(item, "external_id", None),
        "item_name": getattr(item, "name", None),
    }


def _image_fields(image) -> dict[str, Any]:
    fields = _item_fields(image)
    fields["image_id"] = getattr(image, "pk", None)
    fields["source"] = getattr(image, "source", None)
    return fields


DEFAULT_EXTRACTORS: "MappingProxyType[str, Extractor]" = MappingProxyType(
    {"job": _job_fields, "item": _item_fields, "image": _image_fields}
)

LEVELS_REQUIRING_REASON = ("warning", "error")


class ImagehubLogger:
    def __init__(self, logger, context: Optional[dict[str, Any]] = None):
        self._logger = logger
        self._context = dict(context or {})
        self._extractors = DEFAULT_EXTRACTORS

    @classmethod
    def get_logger(cls, name: str) -> "ImagehubLogger":
        # The structlog. prefix routes the records to the structlog handlers
        # configured in LOGGING
        return cls(structlog.get_logger(f"structlog.{name}"))

    def bind(self, **kwargs: Any) -> "ImagehubLogger":
        """
        Return a copy of this logger with ``kwargs`` added to every event.
        Bound domain objects go through the extractors as well.
        """
        return ImagehubLogger(self._logger, context={**self._context, **kwargs})

    def log(
        self,
        level: str,
        message: str,
        *,
        event_code: str,
        reason: Optional[str] = None,
        reason_code: Optional[str] = None,
        **context: Any,
    ) -> None:
        if not message:
            raise ValueError("Log message is required.")
        if not event_code:
            raise ValueError("Structured logs must include an 'event_code' field.")
        if level in LEVELS_REQUIRING_REASON and not (reason and reason_code):
            raise ValueError(
                "Warnings and errors must include both 'reason' and 'reason_code'."
            )

        fields = {
            "event_code": event_code,
            "reason": reason,
            "reason_code": reason_code,
        }

        # Call arguments take precedence over bound values
        values = {**self._context, **context}
        for key, extractor in self._extractors.items():
            obj = values.pop(key, None)
            if obj:
                for name, value in extractor(obj).items():
                    if value is not None:
                        fields.setdefault(name, value)

        fields.update({k: v for k, v in values.items() if v is not None})

        getattr(self._logger, level)(
            message, **{k: v for k, v in fields.items() if v is not None}
        )

    def debug(self, message: str, *, event_code: str, **kwargs):
        self.log("debug", message, event_code=event_code, **kwargs)

    def info(self, message: str, *, event_code: str, **kwargs):
        self.log("info", message, event_code=event_code, **kwargs)

    def warning(
        self, message: str, *, event_code: str, reason: str, reason_code: str, **kwargs
    ):
        self.log(
            "warning",
            message,
            event_code=event_code,
            reason=reason,
            reason_code=reason_code,
            **kwargs,
        )

    def error(
        self, message: str, *, event_code: str, reason: str, reason_code: str, **kwargs
    ):
        self.log(
            "error",
            message,
            event_code=event_code,
            reason=reason,
            reason_code=reason_code,
            **kwargs,
        )
