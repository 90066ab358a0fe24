import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Round countdown (seconds)
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '30'))
    # Player slots when createRoom omits a capacity; must divide 36
    DEFAULT_CAPACITY = int(os.environ.get('DEFAULT_CAPACITY', '2'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    # Idle rooms (not mid-round) are closed after this many seconds. 0 disables.
    ROOM_IDLE_TIMEOUT_SEC = int(os.environ.get('ROOM_IDLE_TIMEOUT_SEC', '600'))
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get('ROOM_SWEEP_INTERVAL_SEC', '60'))
    # When disabled, round timers are armed but only expire via RoundTimer.fire()
    ROUND_TIMER_ENABLED = os.environ.get('ROUND_TIMER_ENABLED', '1') not in ('0', 'false', 'False')
