"""
Settings for a session and the transport it uses.
"""
from cardriver.config.config import load_config, apply_conf_path
from cardriver.support.mixins import StringerMixin
from cardriver.transport.base import SPP_UUID
from cardriver.transport.rfcomm import RfcommTransport
from cardriver.transport.serial_transport import SerialTransport

config_name = 'cardriver'


class SessionSettings(StringerMixin):
    """
    The configuration surface of a session. All values are supplied at construction.

    :param address: the address of the vehicle. For RFCOMM, the Bluetooth address. For serial, the port name.
    :param service_uuid: the UUID of the serial port service on the vehicle
    :param max_retries: the number of reconnection attempts after a connection fails
    :param retry_delay_ms: the fixed delay between reconnection attempts, in milliseconds
    :param read_buffer_size: the most bytes returned by a single read
    :param transport: the kind of transport, 'rfcomm' or 'serial'
    """

    def __init__(self, address=None, service_uuid=SPP_UUID, max_retries=3, retry_delay_ms=2000,
                 read_buffer_size=1024, transport='rfcomm', channel=1, connect_timeout=10.0, baudrate=9600):
        self.address = address
        self.service_uuid = service_uuid
        self.max_retries = max_retries
        self.retry_delay_ms = retry_delay_ms
        self.read_buffer_size = read_buffer_size
        self.transport = transport
        self.channel = channel
        self.connect_timeout = connect_timeout
        self.baudrate = baudrate

    @property
    def retry_delay(self):
        """ the retry delay in seconds """
        return self.retry_delay_ms / 1000.0


def load_settings(directory=None, user_directory='~', **overrides) -> SessionSettings:
    """
    Loads the session settings from the layered configuration files.
    :param directory: the directory of the configuration files. Defaults to those shipped with the package.
    :param overrides: settings that take precedence over the files. None values are ignored.
    """
    conf = load_config(config_name, directory, user_directory)
    settings = SessionSettings()
    apply_conf_path(conf, ['session'], settings)
    apply_conf_path(conf, ['transport'], settings)
    for k, v in overrides.items():
        if v is not None:
            setattr(settings, k, v)
    return settings


def create_transport(settings: SessionSettings):
    """
    Creates the transport named by the settings.
    """
    if settings.transport == 'rfcomm':
        return RfcommTransport(channel=settings.channel, connect_timeout=settings.connect_timeout)
    if settings.transport == 'serial':
        return SerialTransport(baudrate=settings.baudrate)
    raise ValueError("unknown transport '%s'" % settings.transport)
