"""
Tests for lifecycle event delivery.
"""

import threading

import pytest

from models.lifecycle_event import LifecycleEvent
from pipeline.dispatch import EventDispatcher


class TestEventDispatcher:
    def test_delivers_in_order(self):
        received = []
        dispatcher = EventDispatcher()
        dispatcher.subscribe(received.append)
        dispatcher.start()

        events = [
            LifecycleEvent.appeared("AUD_5"),
            LifecycleEvent.still_present("AUD_5"),
            LifecycleEvent.disappeared(),
        ]
        for event in events:
            dispatcher.publish(event)

        assert dispatcher.flush(timeout=2.0)
        assert received == events
        dispatcher.stop()

    def test_delivers_on_dispatcher_thread(self):
        threads = []
        dispatcher = EventDispatcher(name="presentation")
        dispatcher.subscribe(lambda event: threads.append(threading.current_thread().name))
        dispatcher.start()
        dispatcher.publish(LifecycleEvent.appeared("AUD_5"))
        dispatcher.flush(timeout=2.0)
        dispatcher.stop()
        assert threads == ["presentation"]

    def test_every_subscriber_gets_every_event(self):
        a, b = [], []
        dispatcher = EventDispatcher()
        dispatcher.subscribe(a.append)
        dispatcher.subscribe(b.append)
        dispatcher.start()
        dispatcher.publish(LifecycleEvent.appeared("AUD_5"))
        dispatcher.flush(timeout=2.0)
        dispatcher.stop()
        assert len(a) == len(b) == 1

    def test_failing_subscriber_does_not_block_others(self):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        dispatcher = EventDispatcher()
        dispatcher.subscribe(broken)
        dispatcher.subscribe(received.append)
        dispatcher.start()
        dispatcher.publish(LifecycleEvent.appeared("AUD_5"))
        dispatcher.publish(LifecycleEvent.disappeared())
        assert dispatcher.flush(timeout=2.0)
        dispatcher.stop()
        assert len(received) == 2

    def test_none_is_ignored(self):
        received = []
        dispatcher = EventDispatcher()
        dispatcher.subscribe(received.append)
        dispatcher.start()
        dispatcher.publish(None)
        assert dispatcher.flush(timeout=1.0)
        dispatcher.stop()
        assert received == []

    def test_stop_drains_queue(self):
        received = []
        dispatcher = EventDispatcher()
        dispatcher.subscribe(received.append)
        for _ in range(5):
            dispatcher.publish(LifecycleEvent.still_present("AUD_5"))
        dispatcher.start()
        dispatcher.stop()
        assert len(received) == 5
        assert not dispatcher.is_running

    def test_flush_times_out_when_not_running(self):
        dispatcher = EventDispatcher()
        dispatcher.publish(LifecycleEvent.appeared("AUD_5"))
        assert dispatcher.flush(timeout=0.05) is False

    def test_unsubscribe(self):
        received = []
        dispatcher = EventDispatcher()
        dispatcher.subscribe(received.append)
        dispatcher.unsubscribe(received.append)
        dispatcher.start()
        dispatcher.publish(LifecycleEvent.appeared("AUD_5"))
        dispatcher.flush(timeout=1.0)
        dispatcher.stop()
        assert received == []

    def test_stop_without_start(self):
        EventDispatcher().stop()

    def test_publish_after_stop_is_dropped(self):
        received = []
        dispatcher = EventDispatcher()
        dispatcher.subscribe(received.append)
        dispatcher.start()
        dispatcher.stop()
        assert dispatcher.publish(LifecycleEvent.appeared("AUD_5")) is False
        assert dispatcher.flush(timeout=None) is True
        assert received == []

    def test_restart_after_stop(self):
        received = []
        dispatcher = EventDispatcher()
        dispatcher.subscribe(received.append)
        dispatcher.start()
        dispatcher.stop()
        dispatcher.start()
        assert dispatcher.publish(LifecycleEvent.appeared("AUD_5")) is True
        dispatcher.stop()
        assert [e.label for e in received] == ["AUD_5"]

    def test_slow_stop_keeps_single_consumer(self):
        release = threading.Event()
        dispatcher = EventDispatcher()
        dispatcher.subscribe(lambda event: release.wait(5.0))
        dispatcher.start()
        dispatcher.publish(LifecycleEvent.appeared("AUD_5"))
        dispatcher.stop(timeout=0.05)

        assert dispatcher.is_running
        with pytest.raises(RuntimeError):
            dispatcher.start()

        release.set()
        assert dispatcher.flush(timeout=2.0)
