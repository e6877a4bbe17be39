"""
Implements a transport over a serial port.

Once paired, an SPP device can be bound to a serial device, such as /dev/rfcomm0 on Linux
(`rfcomm bind`) or an outgoing COM port on Windows.
"""
import logging

import serial
from serial import SerialException

from cardriver.transport.base import Transport, TransportError

logger = logging.getLogger(__name__)


class SerialTransport(Transport):
    """
    A transport that communicates via a serial port. The address is the port name.
    """

    def __init__(self, baudrate=9600, serial_factory=serial.Serial):
        """
        :param serial_factory: creates the serial.Serial instance. Receives the port and baudrate.
        """
        self.baudrate = baudrate
        self._serial_factory = serial_factory

    def connect(self, address):
        try:
            # no timeout: reads block until data arrives or the port is closed
            ser = self._serial_factory(port=address, baudrate=self.baudrate, timeout=None)
            logger.info("opened serial port %s" % address)
            return ser
        except (SerialException, OSError, ValueError) as e:
            logger.warning("error opening serial port %s: %s" % (address, e))
            raise TransportError("unable to open %s" % address) from e

    def read(self, handle, size) -> bytes:
        try:
            data = handle.read(1)
            if not data:
                if not handle.is_open:
                    return b''
                # a cancelled read returns no data
                raise TransportError("read cancelled")
            waiting = handle.in_waiting
            if waiting:
                data += handle.read(min(waiting, size - 1))
            return data
        except (SerialException, OSError, TypeError) as e:
            # a port closed underneath a read surfaces as a TypeError from pyserial on some platforms
            raise TransportError("read failed") from e

    def write(self, handle, data: bytes):
        try:
            handle.write(data)
        except (SerialException, OSError) as e:
            raise TransportError("write failed") from e

    def close(self, handle):
        try:
            if hasattr(handle, 'cancel_read'):
                handle.cancel_read()
            handle.close()
        except (SerialException, OSError) as e:
            raise TransportError("close failed") from e
