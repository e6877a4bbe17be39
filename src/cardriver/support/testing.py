"""
Test doubles shared by the test modules.
"""
import sys
import threading
import time
from queue import Queue

from cardriver.transport.base import Transport, TransportError


def debug_timeout(value):
    """
    Replaces the timeout value with a very large one if the tests are running under a debugger.
    This prevents the main thread from throwing an exception and exiting when the test times out
    due to a breakpoint.
    """
    return value if sys.gettrace() is None else 100000


class FakeHandle:
    """ An open stream of a FakeTransport. Reads are scripted, writes are recorded. """
    _closed = object()

    def __init__(self, name=None):
        self.name = name
        self.reads = Queue()
        self.writes = []
        self.write_error = None
        self.closed = False
        self._lock = threading.Lock()

    def feed(self, *items):
        """ queues data (bytes), end of stream (b'') or errors (exceptions) for the reader """
        for item in items:
            self.reads.put(item)

    def read(self):
        item = self.reads.get()
        if item is FakeHandle._closed:
            self.reads.put(item)
            raise TransportError("handle closed")
        if isinstance(item, BaseException):
            raise item
        return item

    def write(self, data):
        if self.closed:
            raise TransportError("handle closed")
        if self.write_error is not None:
            raise self.write_error
        with self._lock:
            self.writes.append(bytes(data))

    def close(self):
        self.closed = True
        self.reads.put(FakeHandle._closed)


class FakeTransport(Transport):
    """
    A transport whose connect outcomes are scripted.

    :param outcomes: items returned by successive connect calls. An exception is raised,
        anything else is returned as the handle. When exhausted, a new FakeHandle is returned.
    """

    def __init__(self, outcomes=()):
        self.outcomes = list(outcomes)
        self.addresses = []
        self.handles = []
        self.closed = []
        self.close_error = None
        self.gate = None            # when set to an Event, connect waits for it
        self._lock = threading.Lock()
        self.connecting = threading.Event()

    @property
    def connect_count(self):
        with self._lock:
            return len(self.addresses)

    def connect(self, address):
        with self._lock:
            self.addresses.append(address)
            outcome = self.outcomes.pop(0) if self.outcomes else FakeHandle(address)
        self.connecting.set()
        if self.gate is not None:
            self.gate.wait()
        if isinstance(outcome, BaseException):
            raise outcome
        with self._lock:
            self.handles.append(outcome)
        return outcome

    def read(self, handle, size):
        data = handle.read()
        return data[:size]

    def write(self, handle, data):
        handle.write(data)

    def close(self, handle):
        with self._lock:
            self.closed.append(handle)
        handle.close()
        if self.close_error is not None:
            raise self.close_error


class EventRecorder:
    """ An event handler that records events and lets a test wait for them. """

    def __init__(self):
        self.events = []
        self._condition = threading.Condition()

    def __call__(self, event):
        with self._condition:
            self.events.append(event)
            self._condition.notify_all()

    def snapshot(self):
        with self._condition:
            return list(self.events)

    def of_type(self, *types):
        return [e for e in self.snapshot() if isinstance(e, types)]

    def types(self):
        return [type(e) for e in self.snapshot()]

    def wait_for(self, predicate, timeout=5):
        """ waits until predicate(events) is true. Returns the final value of the predicate. """
        with self._condition:
            return self._condition.wait_for(lambda: predicate(list(self.events)), timeout)

    def wait_for_type(self, event_type, count=1, timeout=5):
        return self.wait_for(lambda events: len([e for e in events if isinstance(e, event_type)]) >= count,
                             timeout)


def wait_until(predicate, timeout=5, interval=0.01):
    """ polls predicate until it is true or the timeout expires. Returns the last value of the predicate. """
    deadline = time.monotonic() + timeout
    result = predicate()
    while not result and time.monotonic() < deadline:
        time.sleep(interval)
        result = predicate()
    return result
