import unittest

from hamcrest import assert_that, calling, raises, is_, instance_of

from cardriver.transport.base import Transport, TransportError, SPP_UUID


class TransportTest(unittest.TestCase):

    def test_abstract_methods(self):
        sut = Transport()
        assert_that(calling(sut.connect).with_args('addr'), raises(NotImplementedError))
        assert_that(calling(sut.read).with_args(None, 1), raises(NotImplementedError))
        assert_that(calling(sut.write).with_args(None, b'f'), raises(NotImplementedError))
        assert_that(calling(sut.close).with_args(None), raises(NotImplementedError))

    def test_transport_error_is_an_io_error(self):
        assert_that(TransportError(), is_(instance_of(IOError)))

    def test_spp_uuid(self):
        assert_that(SPP_UUID, is_('00001101-0000-1000-8000-00805F9B34FB'))
