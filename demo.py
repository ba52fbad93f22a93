import json
import threading
from ordered_map import OrderedStringMap


def demo_basic_operations():
    print("Demo 1: Basic operations")
    m = OrderedStringMap()

    m.set("x", 1)
    m.set("y", 2)
    m.set("x", 3)
    print(f"key_order() = {m.key_order()}")
    print(f"get('x') = {m.get('x')}")
    print(f"get('z') = {m.get('z')}")
    print(f"len = {len(m)}")
    print()


def demo_delete():
    print("Demo 2: Delete")
    m = OrderedStringMap()

    m.set("a", "alpha")
    m.set("b", "beta")
    m.delete("a")
    m.delete("missing")
    print(f"key_order() = {m.key_order()}")
    print(f"get('a') = {m.get('a')}")
    print()


def demo_reindex():
    print("Demo 3: Reindex")
    m = OrderedStringMap()

    for key in ["a", "b", "c"]:
        m.set(key, key)
    m.set("a", "again")
    m.set("a", "and again")

    before = m.key_order()
    m.reindex()
    after = m.key_order()
    print(f"  Before: {before}")
    print(f"  After:  {after}")

    if before == after:
        print("  ✓ Order preserved")
    else:
        print("  ✗ Order changed!")
    print()


def demo_overflow():
    print("Demo 4: Counter overflow")

    class SmallCounterMap(OrderedStringMap):
        MAX_STAMP = 4

    m = SmallCounterMap()
    expected = []
    for i, key in enumerate(["a", "b", "c", "a", "b", "a", "c", "b"]):
        m.set(key, i)
        if key in expected:
            expected.remove(key)
        expected.append(key)

    print(f"  key_order() = {m.key_order()}")
    if m.key_order() == expected:
        print("  ✓ Recency survived repeated reindexing")
    else:
        print(f"  ✗ Expected {expected}")
    print()


def demo_json():
    print("Demo 5: JSON encoding")
    inner = OrderedStringMap()
    inner.set("depth", 2)

    m = OrderedStringMap()
    m.set("a", 1)
    m.set("b", "x")
    m.set("nested", inner)

    text = m.to_json(indent=2)
    print(text)
    print(f"  Decoded: {json.loads(text)}")
    print()


def demo_concurrent_access():
    print("Demo 6: Concurrent Access (Thread Safety)")
    m = OrderedStringMap()
    errors = []

    def worker_set(thread_id, iterations):
        for i in range(iterations):
            m.set(f"{thread_id}-{i}", i)

    def worker_read(thread_id, iterations):
        for i in range(iterations):
            order = m.key_order()
            if len(order) != len(set(order)):
                errors.append(f"Thread {thread_id} saw duplicate keys")

    threads = []
    for i in range(4):
        threads.append(threading.Thread(target=worker_set, args=(i, 100)))
    for i in range(4, 6):
        threads.append(threading.Thread(target=worker_read, args=(i, 50)))

    for t in threads:
        t.start()
    for t in threads:
        t.join()

    print(f"  Entries: {len(m)}")
    print(f"  Errors: {len(errors)}")
    if len(m) == 400 and not errors:
        print("  ✓ All writes landed, no inconsistent snapshots")
    else:
        print("  ✗ Invariant violated")
    print()


if __name__ == "__main__":
    demo_basic_operations()
    demo_delete()
    demo_reindex()
    demo_overflow()
    demo_json()
    demo_concurrent_access()
