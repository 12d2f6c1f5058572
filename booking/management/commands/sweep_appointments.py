from django.core.management.base import BaseCommand

from booking.services.sweeper import POLICY_ALL, POLICY_DUE, ExpirationSweeper


class Command(BaseCommand):
    help = "Run one expiration sweep: complete confirmed appointments and attach prescriptions."

    def add_arguments(self, parser):
        parser.add_argument('--policy', choices=[POLICY_ALL, POLICY_DUE], help='Override SWEEP_POLICY for this run')

    def handle(self, *args, **options):
        result = ExpirationSweeper(policy=options.get('policy')).sweep()
        self.stdout.write(self.style.SUCCESS(
            f"Completed {result.completed} appointment(s) for {result.patients} patient(s); "
            f"{result.prescriptions} prescription(s), {result.prescription_failures} prescription failure(s), "
            f"{result.patient_failures} patient failure(s)"
        ))
