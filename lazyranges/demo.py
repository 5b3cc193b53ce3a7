from itertools import chain
from time import sleep, perf_counter

from .ranges import (
    fast_array_range,
    null_terminated,
    pairwise,
    infinite_iota,
    take,
    only,
    only_lazy,
    lazy_init_range,
    map_range,
)
from .utils import compare_checked_modes


def expensive_step(a, b):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({a}, {b}) ...")
    sleep(0.2)
    return b - a


def main():
    print("\n--- Demo: pairwise is lazy (no work until pulled) ---")
    diffs = pairwise(expensive_step, [1, 4, 9, 16, 25, 36])
    print("Constructed pipeline. Nothing computed yet.")
    t0 = perf_counter()
    first_two = list(take(diffs, 2))
    print(f"First two differences: {first_two} ({perf_counter() - t0:.2f}s)\n")

    print("--- Demo: infinite iota bounded by take ---")
    print(f"Squares: {list(map_range(lambda n: n * n, take(infinite_iota(1), 6)))}")
    print(f"infinite_iota(10)[5] = {infinite_iota(10)[5]}\n")

    print("--- Demo: sentinel-terminated block ---")
    print(f"Characters before the terminator: {list(null_terminated('hello' + chr(0) + 'garbage'))}\n")

    print("--- Demo: only_lazy re-reads its producer ---")
    state = {"value": 1}
    r = only_lazy(lambda: state["value"])
    print(f"  value now: {list(r)}")
    state["value"] = 2
    print(f"  value after update: {list(r)}\n")

    print("--- Demo: lazy_init_range sees an earlier stage's side effect ---")
    todo, done = [], []
    stages = chain(
        only(lambda: todo.extend([1, 2, 3])),
        lazy_init_range(lambda: map_range(lambda n: (lambda: done.append(n)), fast_array_range(todo))),
    )
    for step in stages:
        step()
    print(f"  done: {done}\n")

    print("--- Demo: checked vs unchecked traversal ---")
    result = compare_checked_modes(list(range(200_000)), repeat=3)
    print(f"  checked: {result['checked_time_ms']:.2f}ms, unchecked: {result['unchecked_time_ms']:.2f}ms")


if __name__ == "__main__":
    main()
