"""
Maintains a session with the vehicle over a transport.

The session connects to the vehicle, listens for messages on a background thread, sends
commands on a writer thread and reconnects when the link drops. Callers are never blocked on
I/O: results arrive as events posted to `SessionManager.events`.

State machine::

    DISCONNECTED/FAILED --connect()--> CONNECTING --ok--> CONNECTED
    CONNECTING/CONNECTED --failure--> RECONNECTING(1) --failure--> ... RECONNECTING(max_retries)
    RECONNECTING(n) --ok--> CONNECTED
    RECONNECTING(max_retries) --failure--> FAILED
    any --disconnect()--> DISCONNECTED

A single lock guards the state and the transport handle. It is never held while blocking on I/O.
Background work is tagged with the generation it was started in; `connect()` and `disconnect()`
start a new generation, so the results of work from an earlier one are discarded.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

from cardriver.protocol.commands import Intent, encode, decode
from cardriver.settings import SessionSettings
from cardriver.support.async_loop import AsyncLoop
from cardriver.support.events import ExecutorEventSource
from cardriver.support.mixins import CommonEqualityMixin, StringerMixin
from cardriver.support.retry_strategy import FixedRetryStrategy
from cardriver.transport.base import Transport, TransportError

logger = logging.getLogger(__name__)


class SessionState(Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    RECONNECTING = 'reconnecting'
    FAILED = 'failed'


class SessionError(Exception):
    """ Indicates an error condition with a session. """


class NotConnectedError(SessionError):
    """ Indicates the session is not connected when a connection is required. """


class SessionEvent(CommonEqualityMixin, StringerMixin):
    """ base class for session events. """
    def __init__(self, session):
        self.session = session


class ConnectedEvent(SessionEvent):
    """ The session is connected to the vehicle. """


class DisconnectedEvent(SessionEvent):
    """ The session was disconnected by the caller. """


class ConnectionLostEvent(SessionEvent):
    """ An established connection failed. Reconnection follows. """
    def __init__(self, session, reason=None):
        super().__init__(session)
        self.reason = reason


class ReconnectAttemptEvent(SessionEvent):
    """ A connection attempt failed and attempt number `attempt` is scheduled. """
    def __init__(self, session, attempt):
        super().__init__(session)
        self.attempt = attempt


class ConnectionFailedEvent(SessionEvent):
    """ The retries are exhausted. The session stays failed until connect() is called. """
    def __init__(self, session, reason=None):
        super().__init__(session)
        self.reason = reason


class MessageReceivedEvent(SessionEvent):
    """ Text received from the vehicle, one event per read. """
    def __init__(self, session, text):
        super().__init__(session)
        self.text = text


class SendErrorEvent(SessionEvent):
    """ Writing a command failed. """
    def __init__(self, session, intent, error):
        super().__init__(session)
        self.intent = intent
        self.error = error


class NotConnectedEvent(SessionEvent):
    """ A command was sent while the session was not connected. It was not sent. """
    def __init__(self, session, intent):
        super().__init__(session)
        self.intent = intent


class ListenLoop(AsyncLoop):
    """
    Reads from the transport on a background thread and hands the data to the session.
    The loop stops at the end of the stream or on the first read error.

    :param session: the session that owns the handle
    :param generation: the session generation the handle belongs to
    :param handle: the transport handle to read from
    """

    def __init__(self, session, generation, handle, log=logger):
        super().__init__(name="cardriver-listen-%d" % generation, log=log)
        self.session = session
        self.generation = generation
        self.handle = handle

    def loop(self):
        session = self.session
        try:
            data = session.transport.read(self.handle, session.settings.read_buffer_size)
        except TransportError as e:
            self._ended(e)
            return
        if not data:
            self._ended(TransportError("end of stream"))
        else:
            session._message_received(self.generation, self.handle, data)

    def _ended(self, reason):
        self.stop(wait=False)
        self.session._listen_ended(self.generation, self.handle, reason)

    def exception_handler(self, e):
        self.logger.exception("unexpected error reading from the vehicle: %s" % e)
        self._ended(e)


class SessionManager:
    """
    Manages the connection to the vehicle and sends commands over it.

    :param transport: the transport used to reach the vehicle
    :param settings: the session settings. Defaults are used when not given.
    :param events: the event source receiving session events. The default delivers events in order
        on a dedicated thread. Handlers may call back into the session.
    """

    def __init__(self, transport: Transport, settings: SessionSettings=None, events=None, log=logger):
        self.transport = transport
        self.settings = settings or SessionSettings()
        self._owns_events = events is None
        self.events = events if events is not None else ExecutorEventSource()
        self.logger = log
        self.retry_strategy = FixedRetryStrategy(self.settings.max_retries, self.settings.retry_delay)
        self._lock = threading.RLock()
        self._state = SessionState.DISCONNECTED
        self._address = self.settings.address
        self._generation = 0
        self._handle = None
        self._listen_loop = None
        self._retry_timer = None
        self._closed = False
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix='cardriver-writer')

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def attempt(self):
        """ the number of the reconnection attempt currently scheduled or running, 0 when not retrying """
        with self._lock:
            return self.retry_strategy.attempt if self._state is SessionState.RECONNECTING else 0

    @property
    def address(self):
        return self._address

    @property
    def connected(self):
        return self._state is SessionState.CONNECTED

    def connect(self, address=None) -> SessionState:
        """
        Starts connecting to the vehicle on a background thread.
        While a connection is being made or is established, this does nothing.
        :param address: the address to connect to. Defaults to the configured address.
        :return: the state of the session after the call
        :raises SessionError: if the session has been closed
        """
        with self._lock:
            if self._closed:
                raise SessionError("session is closed")
            if self._state in (SessionState.CONNECTING, SessionState.CONNECTED, SessionState.RECONNECTING):
                self.logger.debug("connect ignored, session is %s" % self._state.value)
                return self._state
            address = address or self._address
            if not address:
                raise ValueError("no address to connect to")
            self._address = address
            self._cancel_retry()
            self.retry_strategy.reset()
            self._generation += 1
            generation = self._generation
            self._state = SessionState.CONNECTING
            self.logger.info("connecting to %s" % address)
            threading.Thread(target=self._try_connect, args=(generation, address),
                             name="cardriver-connect-%d" % generation, daemon=True).start()
            return self._state

    def send(self, intent):
        """
        Sends a command to the vehicle on the writer thread.
        :param intent: the Intent to send, or anything Intent.parse() accepts.
        :return: a Future that completes when the command is written. A failed write sets a TransportError
            on the future and starts reconnecting.
        :raises NotConnectedError: if the session is not connected. Nothing is sent.
        """
        intent = Intent.parse(intent)
        with self._lock:
            if self._closed:
                raise NotConnectedError("cannot send %s, session is closed" % intent.name)
            if self._state is not SessionState.CONNECTED:
                self.events.fire(NotConnectedEvent(self, intent))
                raise NotConnectedError("cannot send %s, session is %s" % (intent.name, self._state.value))
            return self._writer.submit(self._write, self._generation, self._handle, intent)

    def disconnect(self):
        """
        Ends the session. Any scheduled retry is cancelled and the connection is closed in the background.
        Safe to call in any state.
        """
        with self._lock:
            self._generation += 1
            self._cancel_retry()
            handle = self._release_handle()
            previous = self._state
            self._state = SessionState.DISCONNECTED
            self.retry_strategy.reset()
            if previous is not SessionState.DISCONNECTED:
                self.logger.info("disconnected from %s" % self._address)
                self.events.fire(DisconnectedEvent(self))
        if handle is not None:
            self._close_in_background(handle)

    def close(self):
        """
        disconnects and releases the background threads. The session cannot connect or send afterwards.
        Closing a closed session does nothing.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.disconnect()
        self._writer.shutdown(wait=False)
        if self._owns_events:
            self.events.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _try_connect(self, generation, address):
        """ runs a connection attempt. Called on a background thread. """
        try:
            handle = self.transport.connect(address)
        except TransportError as e:
            self.logger.debug("unable to connect to %s: %s" % (address, e))
            self._connect_failed(generation, e)
            return
        except Exception as e:
            self.logger.exception("unexpected error connecting to %s: %s" % (address, e))
            self._connect_failed(generation, e)
            return

        with self._lock:
            if generation == self._generation and \
                    self._state in (SessionState.CONNECTING, SessionState.RECONNECTING):
                self._handle = handle
                self._state = SessionState.CONNECTED
                self.retry_strategy.reset()
                self.logger.info("connected to %s" % address)
                # reads wait on the lock, so no message is posted before the connected event
                self._listen_loop = ListenLoop(self, generation, handle, self.logger)
                self._listen_loop.start()
                self.events.fire(ConnectedEvent(self))
                return
        self.logger.debug("discarding connection to %s from an ended session" % address)
        self._close_handle(handle)

    def _connect_failed(self, generation, reason):
        with self._lock:
            if generation == self._generation:
                self._schedule_retry(generation, reason)

    def _schedule_retry(self, generation, reason):
        """ moves to the next reconnection attempt, or to FAILED when no attempts remain. Lock must be held. """
        delay = self.retry_strategy.next_delay()
        if delay is None:
            self._state = SessionState.FAILED
            self.logger.info("connection to %s failed after %d retries" %
                             (self._address, self.retry_strategy.attempt))
            self.events.fire(ConnectionFailedEvent(self, reason))
            return
        attempt = self.retry_strategy.attempt
        self._state = SessionState.RECONNECTING
        self.logger.info("reconnecting to %s in %.1fs (attempt %d of %d)" %
                         (self._address, delay, attempt, self.retry_strategy.max_retries))
        self.events.fire(ReconnectAttemptEvent(self, attempt))
        if generation != self._generation:
            return      # a handler ended or restarted the session
        timer = threading.Timer(delay, self._retry, args=(generation, attempt))
        timer.daemon = True
        self._retry_timer = timer
        timer.start()

    def _retry(self, generation, attempt):
        """ runs on the retry timer thread """
        with self._lock:
            if generation != self._generation or self._state is not SessionState.RECONNECTING or \
                    self.retry_strategy.attempt != attempt:
                return
            self._retry_timer = None
            address = self._address
        self._try_connect(generation, address)

    def _cancel_retry(self):
        timer = self._retry_timer
        self._retry_timer = None
        if timer is not None:
            timer.cancel()

    def _is_current(self, generation, handle):
        return generation == self._generation and handle is self._handle and \
            self._state is SessionState.CONNECTED

    def _write(self, generation, handle, intent):
        """ writes a command. Runs on the writer thread. """
        with self._lock:
            if not self._is_current(generation, handle):
                raise NotConnectedError("connection closed before %s was sent" % intent.name)
        try:
            self.transport.write(handle, encode(intent))
        except TransportError as e:
            with self._lock:
                if self._is_current(generation, handle):
                    self.logger.warning("error sending %s: %s" % (intent.name, e))
                    self.events.fire(SendErrorEvent(self, intent, e))
                    if self._is_current(generation, handle):
                        self._connection_lost(generation, e)
            raise

    def _message_received(self, generation, handle, data):
        with self._lock:
            if self._is_current(generation, handle):
                self.events.fire(MessageReceivedEvent(self, decode(data)))

    def _listen_ended(self, generation, handle, reason):
        with self._lock:
            if self._is_current(generation, handle):
                self._connection_lost(generation, reason)

    def _connection_lost(self, generation, reason):
        """
        Leaves the connected state and starts reconnecting. Lock must be held and the caller must
        have checked the handle is current, so this runs once per connection.
        """
        handle = self._release_handle()
        self._state = SessionState.RECONNECTING
        self.logger.warning("connection to %s lost: %s" % (self._address, reason))
        self.events.fire(ConnectionLostEvent(self, reason))
        if generation == self._generation:
            self._schedule_retry(generation, reason)
        if handle is not None:
            self._close_in_background(handle)

    def _release_handle(self):
        """ detaches the handle and stops the listen loop. Lock must be held. """
        handle = self._handle
        self._handle = None
        loop = self._listen_loop
        self._listen_loop = None
        if loop is not None:
            loop.stop(wait=False)
        return handle

    def _close_in_background(self, handle):
        threading.Thread(target=self._close_handle, args=(handle,), name="cardriver-close", daemon=True).start()

    def _close_handle(self, handle):
        try:
            self.transport.close(handle)
        except (TransportError, OSError) as e:
            self.logger.warning("error closing connection to %s: %s" % (self._address, e))
