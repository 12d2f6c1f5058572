import json
from datetime import date

from channels.generic.websocket import AsyncWebsocketConsumer

from booking.services.slots import slot_group_name


class SlotUpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes slot claim/release events for one doctor, hospital and day."""
    group = None

    async def connect(self):
        kwargs = self.scope["url_route"]["kwargs"]
        try:
            day = date.fromisoformat(kwargs["date"])
        except ValueError:
            await self.close()
            return
        self.group = slot_group_name(kwargs["doctor_id"], kwargs["hospital_id"], day)
        await self.channel_layer.group_add(self.group, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "group": self.group}))

    async def disconnect(self, close_code):
        if self.group:
            await self.channel_layer.group_discard(self.group, self.channel_name)

    async def slot_changed(self, event):
        # event: {"type": "slot.changed", "event": "booked"|"released", "doctorId", "hospitalId", "date", "startTime"}
        await self.send(json.dumps(event))
