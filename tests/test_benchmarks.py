"""
Benchmark Tests for LeanIMT

Batch insertion recomputes each affected node once, so it should beat
repeated single insertion by roughly a factor of the tree depth.

These benchmarks compare:
1. Sequential insert vs insert_many
2. Proof generation and proof-checked update latency
3. Combiner cost (string join vs SHAKE256 vs SHA-256)
"""

import pytest
import time
import os
from typing import Callable, Tuple

from leanimt import (
    LeanIMT,
    LeanIMTConfig,
    shake256_combiner,
    sha256_combiner,
)


# =============================================================================
# BENCHMARK UTILITIES
# =============================================================================

def benchmark(func: Callable, iterations: int = 1000) -> Tuple[float, float]:
    """
    Benchmark a function.
    Returns (total_time, time_per_iteration) in seconds.
    """
    start = time.perf_counter()
    for _ in range(iterations):
        func()
    end = time.perf_counter()

    total = end - start
    per_iter = total / iterations
    return total, per_iter


def format_rate(ops_per_second: float) -> str:
    """Format throughput as human-readable string."""
    if ops_per_second >= 1e6:
        return f"{ops_per_second / 1e6:.2f} Mops/s"
    elif ops_per_second >= 1e3:
        return f"{ops_per_second / 1e3:.2f} Kops/s"
    else:
        return f"{ops_per_second:.2f} ops/s"


def random_leaves(count: int):
    return [os.urandom(32) for _ in range(count)]


def counting(hash_fn):
    """Wrap a combiner, counting calls in .calls"""
    def wrapped(left, right):
        wrapped.calls += 1
        return hash_fn(left, right)
    wrapped.calls = 0
    return wrapped


# =============================================================================
# INSERTION BENCHMARKS
# =============================================================================

class TestInsertionBenchmarks:
    """
    Benchmark single vs batch insertion.
    """

    @pytest.mark.parametrize("count", [256, 1024, 4096])
    def test_sequential_vs_batch(self, count: int):
        """Batch insertion should be faster and hash less."""
        leaves = random_leaves(count)

        sequential_hash = counting(shake256_combiner)
        sequential = LeanIMT(sequential_hash, LeanIMTConfig(tombstone=bytes(32)))
        start = time.perf_counter()
        for leaf in leaves:
            sequential.insert(leaf)
        sequential_time = time.perf_counter() - start

        batch_hash = counting(shake256_combiner)
        batched = LeanIMT(batch_hash, LeanIMTConfig(tombstone=bytes(32)))
        start = time.perf_counter()
        batched.insert_many(leaves)
        batch_time = time.perf_counter() - start

        assert batched.root == sequential.root
        assert batch_hash.calls == count - 1
        assert batch_hash.calls < sequential_hash.calls

        print(f"\n{count} leaves:")
        print(f"  insert:      {sequential_time * 1e3:.2f} ms ({sequential_hash.calls} hashes)")
        print(f"  insert_many: {batch_time * 1e3:.2f} ms ({batch_hash.calls} hashes)")
        print(f"  Ratio:       {sequential_time / batch_time:.2f}x")

    def test_insert_throughput(self):
        """Measure single-insert throughput on a growing tree."""
        tree = LeanIMT(shake256_combiner, LeanIMTConfig(tombstone=bytes(32)))
        leaves = iter(random_leaves(5000))

        _, per_iter = benchmark(lambda: tree.insert(next(leaves)), 5000)
        print(f"\nInsert throughput: {format_rate(1 / per_iter)}")
        print(f"  Latency: {per_iter * 1e6:.2f} µs (depth {tree.get_depth()})")


# =============================================================================
# PROOF BENCHMARKS
# =============================================================================

class TestProofBenchmarks:
    """
    Benchmark proof generation and proof-checked mutation.
    """

    @pytest.fixture(scope="class")
    def leaves(self):
        return random_leaves(2048)

    def test_generate_proof(self, leaves):
        tree = LeanIMT(shake256_combiner, LeanIMTConfig(tombstone=bytes(32)))
        tree.insert_many(leaves)

        _, per_iter = benchmark(lambda: tree.generate_proof(leaves[1000]), 10000)
        print(f"\ngenerate_proof: {per_iter * 1e6:.2f} µs")

    def test_update_cost(self, leaves):
        """Update hashes the path twice: once to verify, once to write."""
        combiner = counting(shake256_combiner)
        tree = LeanIMT(combiner, LeanIMTConfig(tombstone=bytes(32)))
        tree.insert_many(leaves)

        target = leaves[777]
        proof = tree.generate_proof(target)
        combiner.calls = 0

        start = time.perf_counter()
        tree.update(target, os.urandom(32), proof)
        elapsed = time.perf_counter() - start

        assert combiner.calls == 2 * tree.get_depth()
        print(f"\nupdate at depth {tree.get_depth()}: {elapsed * 1e6:.2f} µs")


# =============================================================================
# COMBINER BENCHMARKS
# =============================================================================

class TestCombinerBenchmarks:
    """
    The tree cost is dominated by the combiner.
    """

    @pytest.mark.parametrize("name,hash_fn", [
        ("join", lambda a, b: a + b),
        ("sha256", sha256_combiner),
        ("shake256", shake256_combiner),
    ])
    def test_combiner_throughput(self, name: str, hash_fn):
        left, right = os.urandom(32), os.urandom(32)

        _, per_iter = benchmark(lambda: hash_fn(left, right), 10000)
        print(f"\n{name}: {format_rate(1 / per_iter)}")
