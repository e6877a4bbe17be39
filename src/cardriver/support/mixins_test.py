import unittest

from hamcrest import equal_to, is_, assert_that, is_not, calling, raises

from cardriver.support.mixins import CommonEqualityMixin, StringerMixin


class Value(CommonEqualityMixin, StringerMixin):
    def __init__(self, a=None, b=None):
        self.a = a
        self.b = b


class StringerMixinTest(unittest.TestCase):
    def test_stringer(self):
        sut = Value("123")
        assert_that(str(sut), is_("Value:{'a': '123', 'b': None}"))


class CommonEqualityMixinTest(unittest.TestCase):

    def test_value_equivalence(self):
        e1 = Value()
        e2 = Value()
        e1.a = "123"
        e1.b = 123
        e2.a = "12"+"3"
        e2.b = 123
        assert_that(e1, is_(equal_to(e2)))
        assert_that(e1 == e2, is_(True))
        assert_that(e1 != e2, is_(False))

        e1.b = 0
        assert_that(e1, is_not(equal_to(e2)))
        assert_that(e1 != e2, is_(True))
        assert_that(e1 == e2, is_(False))

    def test_different_types_are_not_equal(self):
        assert_that(Value() == object(), is_(False))

    def test_recursive_call(self):
        e1 = Value()
        e2 = Value()
        e2.a = e1
        e1.a = e2

        def compare():
            return e2 == e1

        assert_that(calling(compare), raises(ValueError, "recursive call"))
