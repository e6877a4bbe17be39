import logging
import socket

from cardriver.transport.base import Transport, TransportError

logger = logging.getLogger(__name__)

# the RFCOMM channel the serial port service is usually registered on
default_channel = 1


class RfcommTransport(Transport):
    """
    A transport that communicates via a Bluetooth RFCOMM socket.

    The address is the device's Bluetooth address, e.g. '7C:9E:BD:D7:FA:12'.
    The socket module has no service discovery, so the channel of the serial port service is
    configured rather than looked up from the SPP UUID.
    """

    def __init__(self, channel=default_channel, connect_timeout=10.0, report_errors=True):
        """
        :param channel: the RFCOMM channel to connect to.
        :param connect_timeout: how long in seconds to wait for the connection. None waits indefinitely.
        """
        self.channel = channel
        self.connect_timeout = connect_timeout
        self._report_errors = report_errors

    def _socket(self):
        family = getattr(socket, 'AF_BLUETOOTH', None)
        protocol = getattr(socket, 'BTPROTO_RFCOMM', None)
        if family is None or protocol is None:
            raise TransportError("Bluetooth RFCOMM sockets are not supported on this platform")
        return socket.socket(family, socket.SOCK_STREAM, protocol)

    def connect(self, address):
        endpoint = (address, self.channel)
        sock = self._socket()
        try:
            sock.settimeout(self.connect_timeout)
            sock.connect(endpoint)
            sock.settimeout(None)
            logger.info("opened RFCOMM socket to %s" % str(endpoint))
            return sock
        except OSError as e:
            method = logger.warning if self._report_errors else logger.debug
            method("error opening RFCOMM socket to %s: %s" % (endpoint, e))
            sock.close()
            raise TransportError("unable to connect to %s" % str(endpoint)) from e

    def read(self, handle, size) -> bytes:
        try:
            return handle.recv(size)
        except OSError as e:
            raise TransportError("read failed") from e

    def write(self, handle, data: bytes):
        try:
            handle.sendall(data)
        except OSError as e:
            raise TransportError("write failed") from e

    def close(self, handle):
        try:
            # shutdown wakes up a thread blocked in recv(), close alone does not
            handle.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        try:
            handle.close()
        except OSError as e:
            raise TransportError("close failed") from e
