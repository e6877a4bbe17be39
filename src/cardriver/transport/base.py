from abc import abstractmethod

# The well-known UUID of the Bluetooth Serial Port Profile service.
SPP_UUID = '00001101-0000-1000-8000-00805F9B34FB'


class TransportError(IOError):
    """ Indicates a failure to connect, read, write or close a transport. """


class Transport:
    """
    A transport opens a bi-directional byte stream to an address and moves bytes over it.
    The stream itself is an opaque handle that is passed back to the read, write and close methods.

    Reads and writes may happen concurrently on the same handle from different threads.
    Closing a handle unblocks a pending read.
    """

    @abstractmethod
    def connect(self, address):
        """
        Opens a stream to the given address. This may block.
        :return: the handle for the open stream
        :raises TransportError: if the stream cannot be opened.
        """
        raise NotImplementedError

    @abstractmethod
    def read(self, handle, size) -> bytes:
        """
        Blocks until at least one byte is available and returns up to size bytes.
        :return: the bytes read. Empty bytes signal the end of the stream.
        :raises TransportError: if the read fails.
        """
        raise NotImplementedError

    @abstractmethod
    def write(self, handle, data: bytes):
        """
        Writes all of data to the stream.
        :raises TransportError: if the write fails.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self, handle):
        """
        Closes the stream.
        :raises TransportError: if closing fails. The handle is unusable regardless.
        """
        raise NotImplementedError
