"""Engine layer: event bus, command queue, physics and the world loop.

``WorldLoop`` lives in ``arpg.engine.world_loop``; it is not re-exported
here because the combat layer imports the event bus from this package.
"""

from arpg.engine.commands import CommandQueue, TickInput
from arpg.engine.event_bus import EventBus

__all__ = ["CommandQueue", "EventBus", "TickInput"]
