"""Game domain services: board, registry, round timer, scoring and the room state machine.

This package contains the core game mechanics. Socket handlers and HTTP
routes call into ``RoomStateMachine`` and never mutate a ``Room`` directly,
keeping transport concerns separated from the rules.
"""

from .registry import RoomRegistry
from .state_machine import RoomStateMachine

__all__ = ['RoomRegistry', 'RoomStateMachine']
