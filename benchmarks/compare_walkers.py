from __future__ import annotations

import argparse
import asyncio
import json
import os
import statistics
import tempfile
import time
from dataclasses import asdict, dataclass
from typing import Callable

from deferfs import DescentWalk, Files, FindWalk, WalkStrategy


@dataclass
class CaseResult:
    walker: str
    case: str
    files: int
    seconds_mean: float
    seconds_min: float
    seconds_max: float


def build_wide_tree(root: str, dirs: int, files_per_dir: int) -> int:
    for d in range(dirs):
        folder = os.path.join(root, f"d{d:04d}")
        os.makedirs(folder, exist_ok=True)
        for f in range(files_per_dir):
            with open(os.path.join(folder, f"f{f:04d}.txt"), "wb") as fh:
                fh.write(b"x")
    return dirs * files_per_dir


def build_deep_tree(root: str, levels: int) -> int:
    folder = root
    for level in range(levels):
        folder = os.path.join(folder, f"l{level:03d}")
        os.makedirs(folder, exist_ok=True)
        with open(os.path.join(folder, "leaf.txt"), "wb") as fh:
            fh.write(b"x")
    return levels


def run_case(
    strategy: WalkStrategy,
    case: str,
    root: str,
    expected: int,
    repeat: int,
    warmup: int,
) -> CaseResult:
    files = Files(walkers=(None, strategy))

    def once() -> float:
        start = time.perf_counter()
        found = asyncio.run(_walk(files, root))
        elapsed = time.perf_counter() - start
        if found != expected:
            raise RuntimeError(
                f"{strategy.name} walk of {case} found {found} files, expected {expected}"
            )
        return elapsed

    for _ in range(warmup):
        once()
    elapsed_list = [once() for _ in range(repeat)]
    return CaseResult(
        walker=strategy.name,
        case=case,
        files=expected,
        seconds_mean=statistics.mean(elapsed_list),
        seconds_min=min(elapsed_list),
        seconds_max=max(elapsed_list),
    )


async def _walk(files: Files, root: str) -> int:
    return len(await files.walk(root))


def _fmt_ms(seconds: float) -> str:
    return f"{seconds * 1000:.2f}"


def print_table(results: list[CaseResult]) -> None:
    print("| Case | Walker | files | mean(ms) | min(ms) | max(ms) |")
    print("|---|---|---:|---:|---:|---:|")
    for r in results:
        print(
            f"| {r.case} | {r.walker} | {r.files} | {_fmt_ms(r.seconds_mean)} |"
            f" {_fmt_ms(r.seconds_min)} | {_fmt_ms(r.seconds_max)} |"
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark find vs portable tree walks")
    parser.add_argument("--repeat", type=int, default=5)
    parser.add_argument("--warmup", type=int, default=1)
    parser.add_argument("--dirs", type=int, default=200)
    parser.add_argument("--files-per-dir", type=int, default=50)
    parser.add_argument("--deep-levels", type=int, default=60)
    parser.add_argument("--json", action="store_true")
    args = parser.parse_args()

    strategies: list[WalkStrategy] = [DescentWalk()]
    native = FindWalk()
    if native.available():
        strategies.insert(0, native)

    results: list[CaseResult] = []
    with tempfile.TemporaryDirectory() as td:
        cases: list[tuple[str, Callable[[str], int]]] = [
            ("wide", lambda r: build_wide_tree(r, args.dirs, args.files_per_dir)),
            ("deep", lambda r: build_deep_tree(r, args.deep_levels)),
        ]
        for case, build in cases:
            root = os.path.join(td, case)
            expected = build(root)
            for strategy in strategies:
                results.append(
                    run_case(strategy, case, root, expected, args.repeat, args.warmup)
                )

    if args.json:
        print(json.dumps([asdict(r) for r in results], indent=2))
    else:
        print_table(results)


if __name__ == "__main__":
    main()
