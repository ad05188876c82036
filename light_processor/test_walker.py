"""
Tests for the prediction walker
Greedy determinism, tie-breaks, self-loops and seed handling
"""
import random

from light_processor.registry import WordRegistry
from light_processor.walker import PredictionWalker


def make_walker(tokens=None, seed_limit=10):
    reg = WordRegistry(rng=random.Random(0))
    if tokens:
        reg.add_tokens(tokens)
    return PredictionWalker(reg, seed_limit=seed_limit)


LIGHT = ["light", "based", "neural", "network", "light", "based", "system"]


def test_end_to_end_generation():
    print("\n=== Testing Greedy Generation ===")
    walker = make_walker(LIGHT)

    output = walker.generate(["light"], 3)
    print(f"generate(['light'], 3) -> {output}")
    # neural was recorded before system, so it wins the 1-1 tie
    assert output == ["based", "neural", "network"]
    assert walker.generate(["light"], 2) == ["based", "neural"]
    print("[PASS] Tie broken by first-recorded successor")


def test_generation_is_deterministic():
    walker = make_walker("the cat sat on the mat and the cat ran".split())
    first = walker.generate(["the"], 5)
    for _ in range(3):
        assert walker.generate(["the"], 5) == first
    assert first == ["cat", "sat", "on", "the", "cat"]


def test_walk_is_read_only():
    walker = make_walker(LIGHT)
    version = walker.registry.version
    assert walker.walk("light", 1) == ["based"]
    assert walker.registry.version == version


def test_stops_at_unknown_word():
    walker = make_walker(["a", "b"])
    # b has no entry of its own
    assert walker.walk("a", 5) == ["b"]
    assert walker.walk("nothing", 5) == []
    assert walker.generate([], 5) == []


def test_zero_steps():
    walker = make_walker(LIGHT)
    assert walker.walk("light", 0) == []


def test_self_loop_repeats_until_max_steps():
    print("\n=== Testing Self Loop ===")
    walker = make_walker(["la", "la", "la"])
    assert walker.registry.get("la").successors == {"la": 2}
    assert walker.walk("la", 4) == ["la", "la", "la", "la"]
    print("[PASS] Self loop followed for every step")


def test_generate_ingests_seed():
    walker = make_walker()
    output = walker.generate(["red", "fish", "blue"], 5)
    reg = walker.registry
    assert reg.get("red").successors == {"fish": 1}
    assert reg.get("fish").successors == {"blue": 1}
    # walk starts at "blue", which is only a trailing token
    assert output == []

    assert walker.generate(["red"], 5) == ["fish", "blue"]


def test_seed_truncated_to_limit():
    print("\n=== Testing Seed Truncation ===")
    walker = make_walker(seed_limit=10)
    seed = [f"t{i}" for i in range(12)]
    output = walker.generate(seed, 5)

    reg = walker.registry
    assert len(reg) == 9
    assert reg.get("t8").successors == {"t9": 1}
    assert "t9" not in reg
    assert all("t10" not in w.successors for w in reg)
    assert output == []
    print("[PASS] Only the first 10 seed tokens were ingested")


if __name__ == "__main__":
    test_end_to_end_generation()
    test_self_loop_repeats_until_max_steps()
    test_seed_truncated_to_limit()
