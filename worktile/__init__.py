"""
worktile - Home-screen work-hours widget package

This is the root package for worktile, the state controller behind a small
multi-page widget that shows clock-in/out times, accrued hours and earnings.

Core modules:
- state: Page state machine and cosmetic settings transitions
- actions: Tap actions and dispatch, including the clock in/out signal
- day_status: Mini-calendar day-status feed decoding
- sizing: Responsive size tiers and typography profiles
- settings_store: Key-value stores and typed settings access
- render: Render instruction emitter and render sink protocol
- widget: Controller running one refresh cycle per event
- mqtt: MQTT transport for taps, renders and host signalling
"""

__version__ = "0.4.2"
