"""
Profiling script for forcegraph tick performance.

Compares exact pairwise charge against the Barnes-Hut approximation
across graph sizes.
"""

import cProfile
import io
import pstats
import random
import time
from pstats import SortKey

from forcegraph import EngineConfig, GraphEngine


def create_graph(n_nodes, n_edges, seed=42):
    """Create a random graph with n nodes and approximately n_edges edges."""
    rng = random.Random(seed)
    nodes = [
        {"id": f"n{i}", "x": rng.uniform(0, 800), "y": rng.uniform(0, 600)}
        for i in range(n_nodes)
    ]
    edges = []
    for _ in range(n_edges):
        source = rng.randrange(n_nodes)
        target = rng.randrange(n_nodes)
        if source != target:
            edges.append({"source": f"n{source}", "target": f"n{target}"})
    return {"nodes": nodes, "edges": edges}


def make_scenario(n_nodes, n_edges, barnes_hut, ticks=50):
    """Build a callable that runs `ticks` steps on a fresh engine."""
    threshold = 0 if barnes_hut else n_nodes + 1
    data = create_graph(n_nodes, n_edges)

    def run():
        engine = GraphEngine(EngineConfig(random_seed=1, barnes_hut_threshold=threshold))
        engine.set_graph(data).run(max_ticks=ticks)

    return run


def benchmark_scenario(name, func, profile=True):
    """Benchmark a scenario and print timing."""
    print(f"\n{'-'*60}")
    print(f"  {name}")
    print("-" * 60)

    if profile:
        profiler = cProfile.Profile()
        start_time = time.time()
        profiler.enable()
        func()
        profiler.disable()
        elapsed = time.time() - start_time

        s = io.StringIO()
        ps = pstats.Stats(profiler, stream=s).sort_stats(SortKey.CUMULATIVE)
        ps.print_stats(10)

        print(f"Time: {elapsed:.3f}s")
        print("\nTop 10 functions:")
        for line in s.getvalue().split("\n")[5:16]:
            if line.strip():
                print(line)

        return elapsed, profiler
    else:
        start_time = time.time()
        func()
        elapsed = time.time() - start_time
        print(f"Time: {elapsed:.3f}s")
        return elapsed, None


def main():
    """Run all profiling scenarios."""
    print("=" * 60)
    print("  forcegraph Tick Profiling (50 ticks)")
    print("=" * 60)

    scenarios = []
    for n_nodes, n_edges in [(50, 75), (200, 300), (1000, 1500)]:
        scenarios.append((f"Exact: {n_nodes} nodes", make_scenario(n_nodes, n_edges, False)))
        scenarios.append((f"Barnes-Hut: {n_nodes} nodes", make_scenario(n_nodes, n_edges, True)))

    results = {}
    for name, func in scenarios:
        elapsed, _ = benchmark_scenario(name, func, profile=False)
        results[name] = elapsed

    print("\n" + "=" * 60)
    print("  Summary")
    print("=" * 60)
    print(f"\n{'Scenario':<35} {'Time':>10}")
    print("-" * 47)
    for name, elapsed in results.items():
        print(f"{name:<35} {elapsed:>10.3f}s")

    print("\nProfile of the largest Barnes-Hut run:")
    benchmark_scenario("Barnes-Hut: 1000 nodes", make_scenario(1000, 1500, True), profile=True)


if __name__ == "__main__":
    main()
