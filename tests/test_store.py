import pytest

from infuser import Binding, DuplicateMapping, InvalidSingletonFlag, InvalidValue, MappingStore


def test_bind_and_lookup_local():
    store = MappingStore()
    binding = store.bind("name", "John")
    assert store.lookup_local("name") is binding
    assert binding == Binding(name="name", value="John")
    assert "name" in store
    assert len(store) == 1


def test_bind_class_records_singleton_flag():
    class Foo: ...

    store = MappingStore()
    binding = store.bind_class("foo", Foo, singleton=True)
    assert binding.is_class
    assert binding.singleton
    assert binding.value is None


def test_rejected_bind_leaves_store_unchanged():
    class Foo: ...

    store = MappingStore()
    store.bind("name", "John")
    with pytest.raises(DuplicateMapping):
        store.bind("name", "David")
    with pytest.raises(InvalidValue):
        store.bind("other", None)
    with pytest.raises(InvalidSingletonFlag):
        store.bind_class("foo", Foo, 1)
    assert list(store) == ["name"]
    assert store.lookup_local("name").value == "John"


def test_lookup_chain_walks_parents_but_local_wins():
    root = MappingStore()
    middle = MappingStore(parent=root)
    leaf = MappingStore(parent=middle)
    root.bind("name", "root")
    root.bind("kind", "root kind")
    middle.bind("name", "middle")

    assert leaf.lookup_local("name") is None
    assert leaf.lookup_chain("name").value == "middle"
    assert leaf.lookup_chain("kind").value == "root kind"
    assert leaf.lookup_chain("unknown") is None


def test_unbind_is_local_and_silent():
    root = MappingStore()
    child = MappingStore(parent=root)
    root.bind("name", "John")
    child.unbind("name")
    child.unbind("never-bound")
    assert root.lookup_local("name") is not None


def test_find_name_by_value_follows_binding_order():
    class Foo: ...

    store = MappingStore()
    shared = object()
    store.bind("b", shared)
    store.bind("a", shared)
    store.bind_class("foo", Foo)
    assert store.find_name_by_value(shared) == "b"
    assert store.find_name_by_value(Foo) == "foo"
    assert store.find_name_by_value(None) is None


def test_find_name_by_value_ignores_parent():
    root = MappingStore()
    child = MappingStore(parent=root)
    root.bind("name", "John")
    assert child.find_name_by_value("John") is None


def test_clear_only_affects_own_bindings():
    root = MappingStore()
    child = MappingStore(parent=root)
    root.bind("name", "John")
    child.bind("kind", "male")
    child.clear()
    assert len(child) == 0
    assert child.lookup_chain("name").value == "John"


def test_items_is_a_snapshot():
    store = MappingStore()
    store.bind("a", 1)
    items = store.items()
    store.bind("b", 2)
    assert [b.name for b in items] == ["a"]
