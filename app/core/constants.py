"""Core constants: broadcast topics, channel names and message types.

Single source of truth for literal values shared by the application,
infrastructure and API layers.
"""

# Local broadcast topic; payload-free refresh signal for UI consumers
SCHEDULE_REFRESH = "schedule:refresh"

# Redis relay channel prefix (broadcast:<topic>)
RELAY_CHANNEL_PREFIX = "broadcast"

# WebSocket message types sent to observing consumers
WS_MESSAGE_OBSERVING = "observing"
WS_MESSAGE_RELEASED = "released"
WS_MESSAGE_ERROR = "error"
