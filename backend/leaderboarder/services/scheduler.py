import threading
from typing import Optional

from leaderboarder import socketio
from .ledger import replenish_all


_stop_event: Optional[threading.Event] = None


def replenish_tick(app) -> int:
    """Run one replenishment and notify score watchers."""
    with app.app_context():
        updated = replenish_all()
        socketio.emit('credits_replenished', {'accounts': updated}, to='scores', namespace='/ws')
        return updated


def _worker(app, stop_event, interval: float) -> None:
    # wait() returns True once stop is requested
    while not stop_event.wait(interval):
        try:
            app.logger.info(f"[replenish-tick] interval={interval}s")
            replenish_tick(app)
        except Exception:
            app.logger.exception("[replenish-tick-failed]")


def start_credit_replenisher(app) -> bool:
    """Start the periodic credit replenisher.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - No-ops when CREDIT_INTERVAL_SEC is 0 or a replenisher is already running
    - Ticks every CREDIT_INTERVAL_SEC seconds until stopped
    """
    global _stop_event
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False

    try:
        interval = float(app.config.get('CREDIT_INTERVAL_SEC', 60))
    except (TypeError, ValueError):
        interval = 60.0
    if interval <= 0:
        app.logger.info("[replenisher-disabled] CREDIT_INTERVAL_SEC=0")
        return False

    if _stop_event is not None and not _stop_event.is_set():
        app.logger.info("[replenisher-skip] already running")
        return False

    _stop_event = threading.Event()
    app.logger.info(f"[replenisher-start] interval={interval}s")
    socketio.start_background_task(_worker, app, _stop_event, interval)
    return True


def stop_credit_replenisher() -> None:
    global _stop_event
    if _stop_event is not None:
        _stop_event.set()
        _stop_event = None
