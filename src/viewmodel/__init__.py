"""Notification view model — the data context templates render against."""

from src.viewmodel.base import TemplateModel, accessor, template_members
from src.viewmodel.decode import decode_view_model
from src.viewmodel.exceptions import DecodeError, ViewModelError
from src.viewmodel.models import (
    EventViewModel,
    EventViewModelDetail,
    EventViewModelDetails,
    NotificationViewConfig,
    NotificationViewModel,
)
from src.viewmodel.types import (
    IMPORTANCE_COLORS,
    IMPORTANCE_EMOJIS,
    IMPORTANCE_NAMES,
    DetailTag,
    EventApplication,
    EventType,
    ViewModelImportance,
)

__all__ = [
    "IMPORTANCE_COLORS",
    "IMPORTANCE_EMOJIS",
    "IMPORTANCE_NAMES",
    "DecodeError",
    "DetailTag",
    "EventApplication",
    "EventType",
    "EventViewModel",
    "EventViewModelDetail",
    "EventViewModelDetails",
    "NotificationViewConfig",
    "NotificationViewModel",
    "TemplateModel",
    "ViewModelError",
    "accessor",
    "decode_view_model",
    "template_members",
]
