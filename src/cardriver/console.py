"""
Drives the vehicle from a terminal, for manual testing.

    python -m cardriver.console 7C:9E:BD:D7:FA:12
    python -m cardriver.console --serial /dev/rfcomm0

Type a key and press enter: w forward, z backward, a left, d right, s, x or an empty line stop.
Intent names and the one-letter wire codes work too, so s always stops. c connects again, q quits.
"""
import argparse
import logging
import sys

from cardriver.protocol.commands import Intent
from cardriver.session import SessionManager, NotConnectedError, MessageReceivedEvent, ReconnectAttemptEvent
from cardriver.settings import load_settings, create_transport

logger = logging.getLogger(__name__)

keys = {
    'w': Intent.FORWARD,
    'z': Intent.BACKWARD,
    'a': Intent.LEFT,
    'd': Intent.RIGHT,
    's': Intent.STOP,
    'x': Intent.STOP,
    '': Intent.STOP,
}


def describe(event):
    if isinstance(event, MessageReceivedEvent):
        return "vehicle: %s" % event.text
    if isinstance(event, ReconnectAttemptEvent):
        return "connection error, retrying (attempt %d)" % event.attempt
    return type(event).__name__.replace('Event', '')


def parse_command(text):
    """
    >>> parse_command('w')
    <Intent.FORWARD: 'f'>
    >>> parse_command('stop')
    <Intent.STOP: 's'>
    """
    text = text.strip().lower()
    intent = keys.get(text)
    return intent if intent is not None else Intent.parse(text)


def run(session: SessionManager, lines, out=sys.stdout):
    """
    Connects the session and sends the commands read from lines until 'q' or the end of input.
    """
    session.events.add(lambda event: print(describe(event), file=out))
    session.connect()
    for line in lines:
        command = line.strip().lower()
        if command == 'q':
            break
        if command == 'c':
            session.connect()
            continue
        try:
            session.send(parse_command(command))
        except ValueError as e:
            print(e, file=out)
        except NotConnectedError:
            pass    # reported by the NotConnected event


def main(argv=None):
    parser = argparse.ArgumentParser(description="Drive the vehicle from the terminal.")
    parser.add_argument('address', nargs='?', help="the Bluetooth address, or serial port with --serial")
    parser.add_argument('--serial', action='store_true', help="connect through a serial port")
    parser.add_argument('--config', help="the directory of the configuration files")
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args(argv)

    root = logging.getLogger('cardriver')
    root.setLevel(logging.DEBUG if args.verbose else logging.INFO)
    root.addHandler(logging.StreamHandler())

    settings = load_settings(args.config, address=args.address, transport='serial' if args.serial else None)
    if not settings.address:
        parser.error("no address given and none configured")
    logger.info("settings %s" % settings)

    with SessionManager(create_transport(settings), settings) as session:
        run(session, sys.stdin)


if __name__ == '__main__':
    main()
