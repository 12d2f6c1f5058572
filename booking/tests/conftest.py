import pytest

from booking.models import User
from booking.tests.helpers import build_directory, make_medicines


@pytest.fixture
def directory(db):
    return build_directory()


@pytest.fixture
def doctor(directory):
    return directory[2]


@pytest.fixture
def patient(db):
    return User.objects.create_user(username='p1', password='P@ssw0rd1', role='patient')


@pytest.fixture
def other_patient(db):
    return User.objects.create_user(username='p2', password='P@ssw0rd1', role='patient')


@pytest.fixture
def medicines(db):
    return make_medicines()
