from django.apps import AppConfig


class ExchangeConfig(AppConfig):
    name = 'apps.exchange'
    verbose_name = 'Exchange'

    def ready(self):
        # Connects the setting_changed receiver that resets shared providers
        from apps.exchange.infrastructure.providers import registry  # noqa: F401
