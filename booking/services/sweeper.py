"""
Expiration sweep: completes confirmed appointments and attaches prescriptions.

``ExpirationSweeper`` performs one pass; ``SweepScheduler`` owns a worker
thread that repeats the pass on a fixed interval. The scheduler is a plain
instance so whoever composes the process (a management command, the ASGI
entrypoint, a test) decides when it starts and stops.
"""
import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable, Optional

from django.conf import settings
from django.db import close_old_connections, connections, transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from booking.exceptions import NoMedicinesAvailable
from booking.models import Appointment
from booking.services.appointments import transition
from booking.services.audit import log_action
from booking.services.prescriptions import PrescriptionGenerator

logger = logging.getLogger(__name__)

POLICY_ALL = 'all'
POLICY_DUE = 'due'


@dataclass
class SweepResult:
    patients: int = 0
    completed: int = 0
    prescriptions: int = 0
    prescription_failures: int = 0
    patient_failures: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


class ExpirationSweeper:
    """One sweep over every patient holding a confirmed appointment.

    With the ``all`` policy every confirmed appointment is completed. With
    ``due`` only those whose date and time are not after the clock are.
    Each patient is handled in its own transaction; a failure there is
    logged and the sweep moves on to the next patient.
    """

    def __init__(self, generator: Optional[PrescriptionGenerator] = None, clock: Callable = timezone.now,
                 policy: Optional[str] = None):
        self.generator = generator or PrescriptionGenerator(clock=clock)
        self.clock = clock
        self.policy = policy or settings.SWEEP_POLICY
        if self.policy not in (POLICY_ALL, POLICY_DUE):
            raise ValueError(f'unknown sweep policy: {self.policy}')

    def candidates(self, now: datetime) -> QuerySet:
        qs = Appointment.objects.filter(status=Appointment.STATUS_CONFIRMED)
        if self.policy == POLICY_DUE:
            local = timezone.localtime(now) if timezone.is_aware(now) else now
            today, hhmm = local.date(), local.strftime('%H:%M')
            qs = qs.filter(Q(date__lt=today) | Q(date=today, time__lte=hhmm))
        return qs

    def sweep(self) -> SweepResult:
        now = self.clock()
        result = SweepResult()
        patient_ids = sorted(set(self.candidates(now).values_list('patient_id', flat=True)))
        logger.info('sweep started: %s patient(s) with confirmed appointments', len(patient_ids))

        for patient_id in patient_ids:
            result.patients += 1
            try:
                self._sweep_patient(patient_id, now, result)
            except Exception:
                result.patient_failures += 1
                logger.exception('sweep failed for patient %s', patient_id)

        if result.completed or result.patient_failures:
            log_action(user=None, action='sweep_run', object_type='appointment', object_id=None,
                       detail=result.as_dict())
        logger.info('sweep finished: %s', result.as_dict())
        return result

    def _sweep_patient(self, patient_id: int, now: datetime, result: SweepResult) -> None:
        with transaction.atomic():
            appointments = list(
                self.candidates(now).filter(patient_id=patient_id).select_for_update().order_by('id')
            )
            created = failed = 0
            for appointment in appointments:
                logger.info('completing appointment %s (scheduled %s %s) for patient %s',
                            appointment.pk, appointment.date, appointment.time, patient_id)
                transition(appointment, Appointment.STATUS_COMPLETED)
                appointment.updated_at = now
                try:
                    with transaction.atomic():
                        prescription = self.generator.generate(appointment)
                except NoMedicinesAvailable:
                    failed += 1
                    logger.warning('no prescription for appointment %s: medicine catalog is empty', appointment.pk)
                    continue
                except Exception:
                    failed += 1
                    logger.exception('prescription generation failed for appointment %s', appointment.pk)
                    continue
                appointment.prescription = prescription
                created += 1

            Appointment.objects.bulk_update(appointments, ['status', 'prescription', 'updated_at'])

        result.completed += len(appointments)
        result.prescriptions += created
        result.prescription_failures += failed


class SweepScheduler:
    """Runs a sweep every ``interval`` seconds on one background thread.

    The first run happens after ``initial_delay`` seconds. Runs never
    overlap: :meth:`run_once` skips if another run holds the lock.
    """

    def __init__(self, sweeper_factory: Callable = ExpirationSweeper, interval: float = 10,
                 initial_delay: float = 2):
        self.sweeper_factory = sweeper_factory
        self.interval = interval
        self.initial_delay = initial_delay
        self._stop_event = threading.Event()
        self._run_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.runs = 0
        self.failures = 0
        self.last_run_at: Optional[datetime] = None
        self.last_result: Optional[SweepResult] = None

    @classmethod
    def from_settings(cls) -> 'SweepScheduler':
        return cls(interval=settings.SWEEP_INTERVAL_SECONDS, initial_delay=settings.SWEEP_INITIAL_DELAY_SECONDS)

    def start(self) -> None:
        if self.is_running():
            logger.info('sweep scheduler already running')
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name='sweep-scheduler', daemon=True)
        self._thread.start()
        logger.info('sweep scheduler started: every %ss after %ss', self.interval, self.initial_delay)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)
            logger.info('sweep scheduler stopped')

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def status(self) -> dict:
        return {
            'running': self.is_running(),
            'interval': self.interval,
            'runs': self.runs,
            'failures': self.failures,
            'lastRunAt': self.last_run_at.isoformat() if self.last_run_at else None,
            'lastResult': self.last_result.as_dict() if self.last_result else None,
        }

    def run_once(self) -> Optional[SweepResult]:
        if not self._run_lock.acquire(blocking=False):
            logger.info('sweep already in progress, skipping')
            return None
        try:
            result = self.sweeper_factory().sweep()
            self.runs += 1
            self.last_run_at = timezone.now()
            self.last_result = result
            return result
        finally:
            self._run_lock.release()

    def _loop(self) -> None:
        if self._stop_event.wait(self.initial_delay):
            return
        try:
            while not self._stop_event.is_set():
                close_old_connections()
                try:
                    self.run_once()
                except Exception:
                    self.failures += 1
                    logger.exception('scheduled sweep failed')
                if self._stop_event.wait(self.interval):
                    break
        finally:
            connections.close_all()
