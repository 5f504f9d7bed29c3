from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"

    def ready(self):
        from notifications.dispatcher import OrderEmailDispatcher

        self.dispatcher = OrderEmailDispatcher.from_settings()
