"""
The wire protocol spoken with the vehicle.

Outbound, each command is a single ASCII byte with no terminator.
Inbound, the vehicle sends free text. There is no framing, so a message boundary is
wherever a read call happened to stop: one read may hold half a message, or several.
"""
from enum import Enum


class Intent(Enum):
    """ A directional intent, valued by its wire code. """
    FORWARD = 'f'
    BACKWARD = 'b'
    LEFT = 'l'
    RIGHT = 'r'
    STOP = 's'

    @classmethod
    def parse(cls, value):
        """
        Converts caller input to an Intent.
        :param value: an Intent, an intent name (any case) or a wire code.
        :raises ValueError: if the value names no intent.

        >>> Intent.parse('forward')
        <Intent.FORWARD: 'f'>
        >>> Intent.parse('s')
        <Intent.STOP: 's'>
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bytes):
            value = value.decode('ascii', errors='replace')
        if isinstance(value, str):
            member = cls.__members__.get(value.strip().upper())
            if member is not None:
                return member
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError("not a recognised intent: %r" % (value,))


text_encoding = 'utf-8'


def encode(intent) -> bytes:
    """
    Encodes an intent as its single byte command.

    >>> encode(Intent.STOP)
    b's'
    """
    return Intent.parse(intent).value.encode('ascii')


def decode(data: bytes) -> str:
    """
    Interprets bytes read from the vehicle as displayable text.
    Bytes that are not valid text are replaced, so this never fails.

    >>> decode(b'ok')
    'ok'
    """
    return bytes(data).decode(text_encoding, errors='replace')
