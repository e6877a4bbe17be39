"""
Hold-to-drive controls for a session.

While a control is held the vehicle moves, and releasing it stops the vehicle. The controls are
enabled only while the session is connected, so a UI can grey out its buttons.
"""
import logging

from cardriver.protocol.commands import Intent
from cardriver.session import SessionManager, ConnectedEvent, ConnectionLostEvent, ConnectionFailedEvent, \
    DisconnectedEvent
from cardriver.support.events import EventSource

logger = logging.getLogger(__name__)


class DriveControls:
    """
    :param session: the session commands are sent over
    """

    def __init__(self, session: SessionManager):
        self.session = session
        self.enabled = session.connected
        self.events = EventSource()         # fires the new value of enabled when it changes
        session.events.add(self._session_events)

    def _session_events(self, event):
        if isinstance(event, ConnectedEvent):
            self._set_enabled(True)
        elif isinstance(event, (ConnectionLostEvent, ConnectionFailedEvent, DisconnectedEvent)):
            self._set_enabled(False)

    def _set_enabled(self, enabled):
        if self.enabled != enabled:
            self.enabled = enabled
            logger.debug("controls %s" % ("enabled" if enabled else "disabled"))
            self.events.fire(enabled)

    def press(self, intent):
        """ starts moving in the direction of the intent.
        :raises NotConnectedError: if the session is not connected.
        """
        return self.session.send(intent)

    def release(self):
        """ stops the vehicle. """
        return self.session.send(Intent.STOP)

    def detach(self):
        self.session.events.remove(self._session_events)
