import threading
import unittest
from unittest.mock import Mock, call

import timeout_decorator
from hamcrest import assert_that, is_, empty, not_

from cardriver.support.events import EventSource, QueuedEventSource, ExecutorEventSource
from cardriver.support.testing import debug_timeout


class EventsTest(unittest.TestCase):

    def test_handlers_empty(self):
        sut = EventSource()
        assert_that(sut.handlers(), is_(empty()))

    def test_handlers_not_empty(self):
        sut = EventSource()
        handler = Mock()
        sut.add(handler)
        assert_that(list(sut.handlers()), is_([handler]))

    def test_no_listeners(self):
        sut = EventSource()
        sut.fire(1)

    def test_manage_handlers(self):
        sut = EventSource()
        m1 = Mock()
        sut.add(m1)
        assert_that(sut._handlers, is_([m1]))

        sut.remove(m1)
        assert_that(sut._handlers, is_([]))

        sut.remove(m1)
        assert_that(sut._handlers, is_([]))

        sut += m1
        assert_that(sut._handlers, is_([m1]))

        sut -= m1
        assert_that(sut._handlers, is_([]))

    def test_fire_all_with_empty_events(self):
        sut = EventSource()
        m1 = Mock()
        sut.add(m1)
        sut.fire_all([])
        m1.assert_not_called()

    def test_listeners(self):
        sut = EventSource()
        l1 = Mock()
        l2 = Mock()
        sut += l1
        sut += l2
        sut.fire(1, v="hey")
        l1.assert_called_once_with(1, v="hey")
        l2.assert_called_once_with(1, v="hey")

        l1.reset_mock()
        l2.reset_mock()

        sut.fire_all([1, 2, 3])
        l1.assert_has_calls([call(1), call(2), call(3)])

    def test_handler_can_remove_itself_while_firing(self):
        sut = EventSource()
        l2 = Mock()

        def once(event):
            sut.remove(once)

        sut += once
        sut += l2
        sut.fire(1)
        l2.assert_called_once_with(1)
        assert_that(list(sut.handlers()), is_([l2]))


class QueuedEventSourceTest(unittest.TestCase):
    def test_constructor(self):
        sut = QueuedEventSource()
        assert_that(sut.event_queue.empty(), is_(True))

    def test_fire_queues_until_published(self):
        sut = QueuedEventSource()
        handler = Mock()
        sut += handler
        sut.fire(1)
        sut.fire_all([2, 3])
        handler.assert_not_called()
        assert_that(sut.publish(), is_(3))
        handler.assert_has_calls([call(1), call(2), call(3)])

    def test_fire_events(self):
        sut = QueuedEventSource()
        sut._fire_all = Mock()
        sut.event_queue.put(1)
        sut.event_queue.put(2)
        sut.publish()
        sut._fire_all.assert_called_once_with([1, 2])

    def test_fire_events_empty(self):
        sut = QueuedEventSource()
        sut._fire_all = Mock()
        assert_that(sut.publish(), is_(0))
        sut._fire_all.assert_not_called()


class ExecutorEventSourceTest(unittest.TestCase):

    @timeout_decorator.timeout(debug_timeout(5))
    def test_delivers_in_order_on_another_thread(self):
        sut = ExecutorEventSource()
        received = []
        threads = set()

        def handler(event):
            threads.add(threading.current_thread())
            received.append(event)

        sut += handler
        for i in range(20):
            sut.fire(i)
        sut.fire_all([20, 21])
        sut.shutdown(wait=True)
        assert_that(received, is_(list(range(22))))
        assert_that(threads, not_(is_({threading.current_thread()})))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_failing_handler_does_not_stop_delivery(self):
        log = Mock()
        sut = ExecutorEventSource(log=log)
        handler = Mock(side_effect=[ValueError("boom"), None])
        sut += handler
        sut.fire(1)
        sut.fire(2)
        sut.shutdown(wait=True)
        assert_that(handler.call_count, is_(2))
        assert_that(log.exception.call_count, is_(1))
