from .notification import NotificationCreate, NotificationRead, NotificationsStateRead

__all__ = ["NotificationCreate", "NotificationRead", "NotificationsStateRead"]
