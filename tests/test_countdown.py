from fallguard.alerts.countdown import AlertCountdownController, AlertState
from fallguard.detectors.fall_detector import FallDecisionEngine
from fallguard.events.models import AlertCancelled, AlertConfirmed, FallDetected

from .conftest import fall_frames


def detection(event_id="evt-1", timestamp=3.0):
    return FallDetected(event_id=event_id, timestamp=timestamp, confidence=97.0)


def make_controller(scheduler=None, clock=None, engine=None, duration=10):
    events = []
    controller = AlertCountdownController(
        scheduler=scheduler,
        duration=duration,
        engine=engine,
        outbox=events.append,
        clock=clock or (lambda: 42.0),
    )
    return controller, events


def test_full_countdown_confirms_once(scheduler):
    controller, events = make_controller(scheduler)
    assert controller.start(detection()).accepted
    assert controller.state is AlertState.COUNTING_DOWN
    assert scheduler.current.interval == 1.0

    for _ in range(10):
        scheduler.current.fire()

    assert controller.state is AlertState.CONFIRMED
    assert controller.remaining == 0
    assert [type(e) for e in events] == [AlertConfirmed]
    assert events[0].event_id == "evt-1"
    assert scheduler.current.cancelled

    # Further ticks change nothing
    result = controller.tick()
    assert not result.accepted
    assert len(events) == 1


def test_cancel_midway(scheduler):
    engine = FallDecisionEngine()
    engine.process_sequence(fall_frames(lying_until=3.0))
    controller, events = make_controller(scheduler, engine=engine)
    controller.start(detection())

    for _ in range(5):
        scheduler.current.fire()
    assert controller.remaining == 5

    result = controller.cancel()

    assert result.accepted
    assert isinstance(result.event, AlertCancelled)
    assert controller.state is AlertState.CANCELLED
    assert controller.remaining == 10
    assert scheduler.current.cancelled
    assert [type(e) for e in events] == [AlertCancelled]

    # Engine reset so a new episode starts cleanly
    assert not engine.episode_active
    assert len(engine.velocity.frames) == 0
    assert engine.baseline is not None


def test_late_tick_after_cancel_cannot_confirm(scheduler):
    controller, events = make_controller(scheduler)
    controller.start(detection())
    stale_callback = scheduler.current.callback

    controller.cancel()
    for _ in range(20):
        stale_callback()

    assert controller.state is AlertState.CANCELLED
    assert not any(isinstance(e, AlertConfirmed) for e in events)


def test_old_ticks_do_not_drive_new_countdown(scheduler):
    controller, events = make_controller(scheduler)
    controller.start(detection("evt-1"))
    stale_callback = scheduler.current.callback
    controller.cancel()

    controller.start(detection("evt-2"))
    stale_callback()
    stale_callback()

    assert controller.remaining == 10
    assert controller.trigger.event_id == "evt-2"


def test_start_while_active_is_rejected(scheduler):
    controller, _ = make_controller(scheduler)
    controller.start(detection("evt-1"))
    scheduler.current.fire()

    result = controller.start(detection("evt-2"))

    assert not result.accepted
    assert result.reason == "countdown_active"
    assert controller.trigger.event_id == "evt-1"
    assert controller.remaining == 9
    assert len(scheduler.handles) == 1


def test_cancel_and_confirm_rejected_when_idle():
    controller, events = make_controller()
    for command in (controller.cancel, controller.confirm_now, controller.tick):
        result = command()
        assert not result.accepted
        assert result.reason == "not_counting_down"
        assert result.state is AlertState.IDLE
    assert events == []


def test_confirm_now_skips_remaining_ticks(scheduler):
    controller, events = make_controller(scheduler, clock=lambda: 7.5)
    controller.start(detection())
    scheduler.current.fire()

    result = controller.confirm_now()

    assert result.accepted
    assert result.event == AlertConfirmed(event_id="evt-1", timestamp=7.5)
    assert controller.state is AlertState.CONFIRMED
    assert scheduler.current.cancelled
    assert not controller.cancel().accepted


def test_terminal_state_requires_rearm_or_new_start(scheduler):
    controller, _ = make_controller(scheduler, duration=2)
    controller.start(detection("evt-1"))
    controller.confirm_now()

    assert controller.rearm().accepted
    assert controller.state is AlertState.IDLE
    assert controller.remaining == 2

    controller.start(detection("evt-2"))
    controller.cancel()
    assert controller.start(detection("evt-3")).accepted
    assert controller.state is AlertState.COUNTING_DOWN


def test_halt_stops_silently(scheduler):
    controller, events = make_controller(scheduler)
    controller.start(detection())
    stale_callback = scheduler.current.callback

    controller.halt()
    stale_callback()

    assert controller.state is AlertState.IDLE
    assert controller.remaining == 10
    assert scheduler.current.cancelled
    assert events == []


def test_manual_ticks_without_scheduler():
    controller, events = make_controller(duration=3)
    controller.start(detection())
    controller.tick()
    controller.tick()
    result = controller.tick()

    assert isinstance(result.event, AlertConfirmed)
    assert len(events) == 1


def test_start_after_confirmation_requires_rearm(scheduler):
    controller, events = make_controller(scheduler)
    controller.start(detection("evt-1"))
    controller.confirm_now()

    result = controller.start(detection("evt-2"))

    assert not result.accepted
    assert result.reason == "alert_confirmed"
    assert controller.state is AlertState.CONFIRMED
    assert controller.trigger.event_id == "evt-1"
    assert len(scheduler.handles) == 1

    controller.rearm()
    assert controller.start(detection("evt-2")).accepted


def test_package_imports_and_controller_shares_owner_lock():
    import threading

    import fallguard

    lock = threading.RLock()
    controller = fallguard.AlertCountdownController(lock=lock)

    with lock:
        assert controller.start(detection()).accepted
    assert controller._lock is lock
