"""
ASGI config for the medbook project.

Wires both HTTP (Django) and WebSocket (Channels), and owns the
expiration sweeper when ``SWEEPER_AUTOSTART`` is enabled.
Order matters: configure Django before importing any Django-dependent modules.
"""
import atexit
import os

# 1) Configure settings before any Django import
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "medbook.settings")

# 2) Ensure Django is fully set up (so models/auth work during imports)
import django  # noqa: E402
django.setup()  # noqa: E402

# 3) Now import ASGI/Channels components and app consumers
from django.conf import settings  # noqa: E402
from django.core.asgi import get_asgi_application  # noqa: E402
from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.auth import AuthMiddlewareStack  # noqa: E402
from django.urls import path  # noqa: E402

from booking.realtime.consumers import SlotUpdatesConsumer  # noqa: E402
from booking.services.sweeper import SweepScheduler  # noqa: E402

django_asgi_app = get_asgi_application()

websocket_urlpatterns = [
    path("ws/slots/<int:doctor_id>/<int:hospital_id>/<str:date>/", SlotUpdatesConsumer.as_asgi()),
]

application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": AuthMiddlewareStack(URLRouter(websocket_urlpatterns)),
})

sweep_scheduler = None
if settings.SWEEPER_AUTOSTART:
    sweep_scheduler = SweepScheduler.from_settings()
    sweep_scheduler.start()
    atexit.register(sweep_scheduler.stop)
