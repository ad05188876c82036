"""
Tests for the word registry
Pair counting, capacity dropping, snapshot ordering and checkpoint state
"""
import random

from light_processor.registry import Word, WordRegistry


def seeded_registry(capacity=100_000, seed=0):
    return WordRegistry(capacity=capacity, rng=random.Random(seed))


def test_repeated_pairs():
    """Every adjacent pair counts, including (b, a)"""
    print("\n=== Testing Repeated Pairs ===")
    reg = seeded_registry()
    reg.add_tokens(["a", "b", "a", "b"])
    reg.add_tokens(["a", "b", "a", "b"])
    reg.add_tokens(["a", "b"])

    a, b = reg.get("a"), reg.get("b")
    print(f"a: {a.frequency} {a.successors}  b: {b.frequency} {b.successors}")
    assert a.frequency == 5
    assert a.successors == {"b": 5}
    assert b.frequency == 2
    assert b.successors == {"a": 2}
    print("[PASS] Repeated pairs counted")


def test_trailing_token_not_registered():
    reg = seeded_registry()
    reg.add_tokens(["x", "y"])
    assert "x" in reg
    assert "y" not in reg
    assert reg.get("x").successors == {"y": 1}


def test_empty_and_single_token_are_noops():
    print("\n=== Testing Degenerate Input ===")
    reg = seeded_registry()
    reg.add_tokens([])
    reg.add_tokens(["lonely"])
    assert len(reg) == 0
    assert reg.version == 0
    assert reg.snapshot() == []
    print("[PASS] No mutation on empty / single-token input")


def test_end_to_end_counts():
    reg = seeded_registry()
    reg.add_tokens(["light", "based", "neural", "network", "light", "based", "system"])

    light, based = reg.get("light"), reg.get("based")
    assert light.frequency == 2
    assert light.successors == {"based": 2}
    assert based.frequency == 2
    assert based.successors == {"neural": 1, "system": 1}
    assert list(based.successors) == ["neural", "system"]
    assert "system" not in reg


def test_capacity_boundary():
    """With capacity 2, the third new current word is dropped"""
    print("\n=== Testing Capacity Boundary ===")
    reg = seeded_registry(capacity=2)
    reg.add_tokens(["a", "b", "c", "d"])

    assert len(reg) == 2
    assert reg.is_full
    assert "c" not in reg
    # successor key recorded even though "c" never becomes a word
    assert reg.get("b").successors == {"c": 1}

    # existing words keep counting and may gain new successor keys
    reg.add_tokens(["a", "z"])
    assert reg.get("a").frequency == 2
    assert reg.get("a").successors == {"b": 1, "z": 1}

    # a pair led by a new word changes nothing
    version = reg.version
    reg.add_tokens(["c", "a"])
    assert reg.version == version
    assert len(reg) == 2
    print("[PASS] Capacity bound held, successors still recorded")


def test_size_bounded_and_monotonic():
    rng = random.Random(42)
    vocab = [f"w{i}" for i in range(20)]
    reg = seeded_registry(capacity=7)
    last = 0
    for _ in range(50):
        reg.add_tokens([rng.choice(vocab) for _ in range(rng.randint(0, 12))])
        assert last <= len(reg) <= 7
        last = len(reg)


def test_snapshot_order_ties_by_insertion():
    print("\n=== Testing Snapshot Ordering ===")
    reg = seeded_registry()
    reg.add_tokens(["x", "y", "z", "w"])
    assert [w.text for w in reg.snapshot()] == ["x", "y", "z"]

    reg.add_tokens(["z", "q"])
    assert [w.text for w in reg.snapshot()] == ["z", "x", "y"]

    reg.add_tokens(["y", "q"])
    # y and z tie at 2; y was inserted first
    assert [w.text for w in reg.snapshot()] == ["y", "z", "x"]
    print("[PASS] Frequency descending, insertion order on ties")


def test_snapshot_idempotent():
    reg = seeded_registry()
    reg.add_tokens("the cat sat on the mat".split())
    first = reg.snapshot()
    second = reg.snapshot()
    assert first == second
    assert [w.text for w in first] == [w.text for w in second]


def test_snapshot_refreshes_after_mutation():
    reg = seeded_registry()
    reg.add_tokens(["a", "b"])
    reg.add_tokens(["c", "d"])
    assert [w.text for w in reg.snapshot()] == ["a", "c"]
    reg.add_tokens(["c", "e"])
    assert [w.text for w in reg.snapshot()] == ["c", "a"]


def test_colors_fixed_and_in_range():
    reg = seeded_registry(seed=3)
    reg.add_tokens("one two three four five six".split())
    colors = {w.text: (w.hue, w.saturation) for w in reg}
    for hue, sat in colors.values():
        assert 0.0 <= hue < 1.0
        assert 0.5 <= sat < 1.0

    reg.add_tokens("one two three".split())
    assert {w.text: (w.hue, w.saturation) for w in reg} == colors

    # same seed, same colors
    other = seeded_registry(seed=3)
    other.add_tokens("one two three four five six".split())
    assert {w.text: (w.hue, w.saturation) for w in other} == colors


def test_best_successor_first_recorded_wins():
    word = Word(text="a", successors={"x": 2, "y": 1})
    assert word.best_successor() == "x"
    word.successors["y"] += 1
    assert word.best_successor() == "x"
    word.successors["y"] += 1
    assert word.best_successor() == "y"
    assert Word(text="empty").best_successor() is None


def test_state_dict_roundtrip():
    print("\n=== Testing Registry State ===")
    reg = seeded_registry(seed=5)
    reg.add_tokens(["light", "based", "neural", "network", "light", "based", "system"])

    restored = seeded_registry()
    restored.load_state_dict(reg.state_dict())

    assert [w.text for w in restored] == [w.text for w in reg]
    assert restored.snapshot() == reg.snapshot()
    assert list(restored.get("based").successors) == ["neural", "system"]
    assert restored.version > reg.version
    print("[PASS] State restored with insertion and successor order")


def test_load_state_respects_smaller_capacity():
    print("\n=== Testing Restore Into Smaller Registry ===")
    big = seeded_registry(capacity=100)
    big.add_tokens([f"w{i}" for i in range(20)])
    assert len(big) == 19

    small = seeded_registry(capacity=3)
    small.load_state_dict(big.state_dict())
    assert len(small) == 3
    assert small.capacity == 3
    assert [w.text for w in small] == ["w0", "w1", "w2"]
    assert small.is_full

    # still drops new words after the restore
    small.add_tokens(["fresh", "w0"])
    assert "fresh" not in small
    assert len(small) == 3
    print("[PASS] First words kept, the rest dropped")


def test_snapshot_is_point_in_time():
    reg = seeded_registry()
    reg.add_tokens(["a", "b", "a", "c"])
    before = reg.snapshot()
    assert before[0].text == "a"
    assert before[0].frequency == 2

    reg.add_tokens(["a", "d"])
    assert before[0].frequency == 2
    assert before[0].successors == {"b": 1, "c": 1}
    assert reg.get("a").frequency == 3

    # editing a snapshot entry leaves the registry alone
    before[0].frequency = 99
    before[0].successors["zzz"] = 5
    assert reg.get("a").frequency == 3
    assert "zzz" not in reg.get("a").successors
    assert reg.snapshot()[0].frequency == 3


if __name__ == "__main__":
    test_repeated_pairs()
    test_load_state_respects_smaller_capacity()
    test_empty_and_single_token_are_noops()
    test_capacity_boundary()
    test_snapshot_order_ties_by_insertion()
    test_state_dict_roundtrip()
