"""Per-user notification preference gate."""

from collections.abc import Mapping
from typing import Any

from push_core.enums import NotificationCategory

MASTER_SWITCH = "pushNotifications"

# Category -> field name the mobile app stores in notificationSettings.
APP_SETTING_FIELDS: dict[str, str] = {
    NotificationCategory.DEVOTIONALS: "devotionals",
    NotificationCategory.EVENTS: "eventReminders",
    NotificationCategory.ANNOUNCEMENTS: "announcementNotifications",
    NotificationCategory.SERMONS: "sermonNotifications",
    NotificationCategory.MESSAGES: "messageNotifications",
    "message": "messageNotifications",
}


def should_notify(
    settings: Mapping[str, Any] | None,
    legacy: Mapping[str, Any] | None = None,
    category: str | None = None,
) -> bool:
    """Return True unless the user has opted out.

    ``settings`` is the app's ``notificationSettings`` map and ``legacy`` the
    older ``notificationPreferences`` map; when settings is empty the legacy
    map stands in for it. Only an explicit ``False`` disables: the master
    switch disables everything, a category flag in either map disables that
    category. Missing flags default to enabled.
    """
    effective = settings or legacy or {}
    if effective.get(MASTER_SWITCH) is False:
        return False
    if category is None:
        return True

    app_field = APP_SETTING_FIELDS.get(category, category)
    if effective.get(app_field) is False:
        return False
    if legacy and legacy.get(category) is False:
        return False
    return True
