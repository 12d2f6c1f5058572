import signal
import threading

from django.conf import settings
from django.core.management.base import BaseCommand

from booking.services.sweeper import SweepScheduler


class Command(BaseCommand):
    help = "Run the expiration sweeper in the foreground until interrupted."

    def add_arguments(self, parser):
        parser.add_argument('--interval', type=float, default=settings.SWEEP_INTERVAL_SECONDS)
        parser.add_argument('--initial-delay', type=float, default=settings.SWEEP_INITIAL_DELAY_SECONDS)

    def handle(self, *args, **options):
        scheduler = SweepScheduler(interval=options['interval'], initial_delay=options['initial_delay'])
        done = threading.Event()
        for sig in (signal.SIGINT, signal.SIGTERM):
            signal.signal(sig, lambda *_: done.set())

        scheduler.start()
        self.stdout.write(self.style.SUCCESS(f"Sweeper running every {options['interval']}s (Ctrl+C to stop)"))
        try:
            done.wait()
        finally:
            scheduler.stop()
        self.stdout.write(self.style.SUCCESS(f"Sweeper stopped after {scheduler.runs} run(s)"))
