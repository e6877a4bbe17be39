import logging
from concurrent.futures import ThreadPoolExecutor
from queue import Queue, Empty

logger = logging.getLogger(__name__)


class EventSource(object):
    """ Fires events synchronously to the registered handlers, on the calling thread. """

    def __init__(self):
        self._handlers = []

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        self._handlers.append(handler)
        return self

    def remove(self, handler):
        if handler in self._handlers:
            self._handlers.remove(handler)
        return self

    def handlers(self):
        return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        self._fire(*args, **kwargs)

    def fire_all(self, events):
        self._fire_all(events)

    def _fire_all(self, events):
        for e in events:
            self._fire(e)

    def _fire(self, *args, **kwargs):
        for handler in self.handlers():
            handler(*args, **kwargs)


class QueuedEventSource(EventSource):
    """
    the public fire() methods post events to the queue. These are fired when a thread
    calls publish(). This lets a single-threaded caller (such as a UI loop) receive events
    on its own thread.
    """
    def __init__(self):
        super().__init__()
        self.event_queue = Queue()

    def fire(self, event):
        self.event_queue.put(event)

    def fire_all(self, events):
        for e in events:
            self.event_queue.put(e)

    def publish(self):
        """ publishes any queued events on the calling thread. """
        queue = self.event_queue
        events = []
        while True:
            try:
                events.append(queue.get_nowait())
            except Empty:
                break
        if events:
            self._fire_all(events)
        return len(events)


class ExecutorEventSource(EventSource):
    """
    Fires events on a single background thread, in the order they were posted.
    The thread posting the event never waits for the handlers.
    """

    def __init__(self, executor=None, log=logger):
        super().__init__()
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix='cardriver-events')
        self.logger = log

    def fire(self, event):
        self._executor.submit(self._deliver, (event,))

    def fire_all(self, events):
        self._executor.submit(self._deliver, tuple(events))

    def _deliver(self, events):
        for e in events:
            try:
                self._fire(e)
            except Exception as ex:
                self.logger.exception("event handler failed for %s: %s" % (e, ex))

    def shutdown(self, wait=True):
        self._executor.shutdown(wait=wait)
