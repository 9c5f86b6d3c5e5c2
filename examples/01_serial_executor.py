#!/usr/bin/env python3
"""Serial Executor - ordered execution across await points.

Three writers hit the same cache concurrently. Without serialization the
fast writer would finish first; through the SerialExecutor every write
completes in the order it was submitted, no matter how long it takes.

Run: python examples/01_serial_executor.py
"""
import asyncio

from serial_spine import SerialExecutor, serialized
from serial_spine.core.logging import configure_logging


cache: dict[str, str] = {}
executor = SerialExecutor(name="cache")


@serialized(executor)
async def write(key: str, value: str, latency: float) -> str:
    """Simulate a slow storage write."""
    await asyncio.sleep(latency)
    cache[key] = value
    return f"{key}={value}"


async def main():
    configure_logging(level="INFO", json_format=False)

    print("=" * 60)
    print("Serial Executor")
    print("=" * 60)

    # === 1. Ordered writes ===
    print("\n[1] Concurrent writes, serial execution")

    results = await asyncio.gather(
        write("user", "v1", latency=0.3),
        write("user", "v2", latency=0.0),
        write("user", "v3", latency=0.1),
    )
    print(f"  Completed: {results}")
    print(f"  Final value: {cache['user']}  (last submitted wins)")

    # === 2. Errors stay with their caller ===
    print("\n[2] Error isolation")

    async def broken() -> None:
        raise ValueError("storage offline")

    outcomes = await asyncio.gather(
        executor.submit(broken),
        executor.submit(lambda: "still running"),
        return_exceptions=True,
    )
    for outcome in outcomes:
        print(f"  - {outcome!r}")

    # === 3. Stats ===
    print("\n[3] Stats")
    stats = executor.stats
    print(f"  submitted={stats.submitted} completed={stats.completed} "
          f"failed={stats.failed} drain_cycles={stats.drain_cycles}")

    print("\n" + "=" * 60)
    print("[OK] Serial Executor Complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
