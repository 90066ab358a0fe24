import logging
import threading
import time

logger = logging.getLogger(__name__)


class RoundTimer:
    """Single-shot delayed action that can be canceled.

    ``start()`` hands a sleeper to ``spawn`` (``socketio.start_background_task``
    at runtime). With ``spawn=None`` the timer is armed but never expires
    on its own; ``fire()`` expires it immediately. The action runs at most
    once and never after ``cancel()``.
    """

    def __init__(self, delay, action, *args, spawn=None, sleep=time.sleep, label=''):
        self.delay = delay
        self.action = action
        self.args = args
        self.label = label
        self._spawn = spawn
        self._sleep = sleep
        self._lock = threading.Lock()
        self._canceled = False
        self._fired = False
        self.deadline = None

    @property
    def active(self) -> bool:
        return not (self._canceled or self._fired)

    def start(self) -> 'RoundTimer':
        self.deadline = time.time() + self.delay
        logger.info(f"[timer-set] {self.label} duration={self.delay}s deadline={self.deadline:.3f}")
        if self._spawn is not None:
            self._spawn(self._run)
        return self

    def _run(self):
        self._sleep(self.delay)
        self.fire()

    def cancel(self) -> bool:
        """Cancel the timer. Returns False if it had already fired or been canceled."""
        with self._lock:
            if not self.active:
                return False
            self._canceled = True
        logger.info(f"[timer-cancel] {self.label}")
        return True

    def fire(self) -> bool:
        """Run the action now unless the timer was canceled or already fired."""
        with self._lock:
            if not self.active:
                logger.info(f"[timer-skip] {self.label} canceled={self._canceled} fired={self._fired}")
                return False
            self._fired = True
        logger.info(f"[timer-fire] {self.label}")
        try:
            self.action(*self.args)
        except Exception:
            logger.exception(f"[timer-error] {self.label}")
        return True
