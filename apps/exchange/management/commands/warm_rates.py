from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.exchange.application.tasks import warm_latest_rates


class Command(BaseCommand):
    help = 'Refresh the latest exchange rates cache for a set of base currencies'

    def add_arguments(self, parser):
        parser.add_argument(
            'currencies',
            nargs='*',
            type=str,
            help='Base currency codes (defaults to EXCHANGE_WARM_BASE_CURRENCIES)'
        )
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Execute synchronously instead of using Celery task queue'
        )

    def handle(self, **options):
        currencies = [code.strip().upper() for code in options['currencies']] or list(
            settings.EXCHANGE_WARM_BASE_CURRENCIES
        )
        sync_mode = options['sync']

        if not currencies:
            raise CommandError('No base currencies given and EXCHANGE_WARM_BASE_CURRENCIES is empty')

        self.stdout.write(
            self.style.SUCCESS(
                f'Warming latest rates for {", ".join(currencies)}...'
            )
        )

        if sync_mode:
            self.stdout.write('Running in synchronous mode...')
            result = warm_latest_rates(currencies)

            if result['success']:
                self.stdout.write(
                    self.style.SUCCESS(
                        f"Cached {result['rates_cached']} rates for "
                        f"{len(result['currencies_refreshed'])} currencies"
                    )
                )
                if result.get('errors'):
                    self.stdout.write(
                        self.style.WARNING(
                            f"Errors: {len(result['errors'])}"
                        )
                    )
            else:
                raise CommandError(f"Failed: {result.get('message') or '; '.join(result['errors'])}")
        else:
            self.stdout.write('Dispatching Celery task...')
            task = warm_latest_rates.delay(currencies)

            self.stdout.write(
                self.style.SUCCESS(
                    f'Task dispatched with ID: {task.id}'
                )
            )
            self.stdout.write(
                'Use "celery -A core inspect active" to check task status'
            )
