from datetime import date

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from booking.models import Doctor
from booking.services.slots import generate_slots


class Command(BaseCommand):
    help = "Generate free appointment slots for active doctors over the booking horizon."

    def add_arguments(self, parser):
        parser.add_argument('--days', type=int, default=settings.SLOT_HORIZON_DAYS)
        parser.add_argument('--start', help='First day (YYYY-MM-DD), defaults to today')
        parser.add_argument('--doctor', type=int, action='append', help='Only this doctor id (repeatable)')

    def handle(self, *args, **options):
        start = None
        if options.get('start'):
            try:
                start = date.fromisoformat(options['start'])
            except ValueError:
                raise CommandError('--start must be YYYY-MM-DD')

        doctors = Doctor.objects.filter(is_active=True).prefetch_related('availability').order_by('id')
        if options.get('doctor'):
            doctors = doctors.filter(id__in=options['doctor'])

        total = 0
        for doctor in doctors:
            created = generate_slots(doctor, start_date=start, days=options['days'])
            total += created
            self.stdout.write(f"{doctor.name}: {created} new slot(s)")
        self.stdout.write(self.style.SUCCESS(f"Created {total} slot(s)"))
