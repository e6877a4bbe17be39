"""
Transports carry bytes between this host and the vehicle.

- Transport: the connect/read/write/close contract used by the session.
- RfcommTransport: a Bluetooth RFCOMM socket to the device address.
- SerialTransport: an SPP link the operating system exposes as a serial port.
"""
