import unittest

from infuser import Container


class TestLifetimeControl(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def tearDown(self):
        self.cont.dispose()

    def test_get_value_singleton_returns_same_instance(self):
        class A: ...

        self.cont.map_class("a", A, singleton=True)
        a1 = self.cont.get_value("a")
        a2 = self.cont.get_value("a")
        assert a2 is a1, "singleton should return the cached instance"

    def test_get_value_not_singleton_returns_new_instances(self):
        class A: ...

        self.cont.map_class("a", A)
        a1 = self.cont.get_value("a")
        a2 = self.cont.get_value("a")
        assert isinstance(a1, A)
        assert isinstance(a2, A)
        assert a2 is not a1, "non singleton should return new instances"

    def test_get_value_from_class_singleton_returns_same_instance(self):
        class A: ...

        self.cont.map_class("a", A, singleton=True)
        assert self.cont.get_value_from_class(A) is self.cont.get_value_from_class(A)

    def test_get_value_from_class_not_singleton_returns_new_instances(self):
        class A: ...

        self.cont.map_class("a", A)
        assert self.cont.get_value_from_class(A) is not self.cont.get_value_from_class(A)

    def test_singleton_shared_between_get_value_and_injection(self):
        class A: ...

        class Injectee:
            def __init__(self):
                self.a = None

        self.cont.map_class("a", A, singleton=True)
        injectee = self.cont.create_instance(Injectee)
        assert injectee.a is self.cont.get_value("a")

    def test_singleton_injected_in_constructors_is_shared(self):
        class A: ...

        class User1:
            def __init__(self, a):
                self.a_param = a

        class User2:
            def __init__(self, a):
                self.a_param = a

        self.cont.map_class("a", A, singleton=True)
        u1 = self.cont.create_instance(User1)
        u2 = self.cont.create_instance(User2)
        assert u1.a_param is u2.a_param

    def test_not_singleton_injected_in_constructors_differs(self):
        class A: ...

        class User:
            def __init__(self, a):
                self.a_param = a

        self.cont.map_class("a", A)
        u1 = self.cont.create_instance(User)
        u2 = self.cont.create_instance(User)
        assert isinstance(u1.a_param, A)
        assert u1.a_param is not u2.a_param

    def test_cached_singleton_maps_back_to_its_name(self):
        class A: ...

        self.cont.map_class("a", A, singleton=True)
        a = self.cont.get_value("a")
        assert self.cont.get_mapping(a) == "a"

    def test_singleton_ignores_arguments_once_cached(self):
        class A:
            def __init__(self, label="default"):
                self.label = label

        self.cont.map_class("a", A, singleton=True)
        first = self.cont.get_value("a", "first")
        second = self.cont.get_value("a", "second")
        assert second is first
        assert second.label == "first"
