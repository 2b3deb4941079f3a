"""Benchmark timetable compression for varying numbers of trains.

Usage:
    python scripts/benchmark_compression.py -Min 10 -Max 50 -Step 10 -Stations 8 -RouteLen 4 -Strategy topological
    python -m scripts.benchmark_compression -Min 2 -Max 8 -Step 2 -Strategy stack

Notes:
    - Topological relaxation is O(V + E).
    - Stack relaxation revisits an event once per path reaching it; keep train counts small.
    - -Method ilp solves the same network with CBC through pulp.
"""

from __future__ import annotations
import argparse, random, statistics, json, time, os, sys

# Ensure project root on path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from scripts.generate_large_scenario import build_scenario  # type: ignore
from uic406.core.compressor import compress_timetable  # type: ignore


def run_once(n_trains: int, n_stations: int, route_len: int, method: str, strategy: str) -> dict:
    repo = build_scenario(n_trains, n_stations, route_len, stagger=60)
    t0 = time.perf_counter()
    result = compress_timetable(repo, method=method, strategy=strategy)
    dt = time.perf_counter() - t0
    return {
        "n_trains": n_trains,
        "method": result.method.value,
        "strategy": strategy,
        "events": result.summary["events"],
        "activities": result.summary["activities"],
        "elapsed_s": dt,
        "original_span": result.summary["original_span"],
        "compressed_span": result.summary["compressed_span"],
    }


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument('-Min', type=int, default=10)
    ap.add_argument('-Max', type=int, default=50)
    ap.add_argument('-Step', type=int, default=10)
    ap.add_argument('-Stations', type=int, default=8)
    ap.add_argument('-RouteLen', type=int, default=4)
    ap.add_argument('-Repeats', type=int, default=3)
    ap.add_argument('-Method', type=str, default='ean', choices=['ean', 'ilp'])
    ap.add_argument('-Strategy', type=str, default='topological', choices=['topological', 'stack'])
    ap.add_argument('-Json', action='store_true')
    args = ap.parse_args()

    random.seed(42)
    rows = []
    for n in range(args.Min, args.Max + 1, args.Step):
        for _ in range(args.Repeats):
            row = run_once(n, args.Stations, args.RouteLen, args.Method, args.Strategy)
            rows.append(row)
            if args.Json:
                print(json.dumps(row))
            else:
                print(f"Trains={row['n_trains']:<3} elapsed={row['elapsed_s']*1000:8.2f} ms events={row['events']:<5} "
                      f"span={row['original_span']}->{row['compressed_span']} method={row['method']}/{row['strategy']}")
    if not args.Json:
        from collections import defaultdict
        by_n = defaultdict(list)
        for r in rows:
            by_n[r['n_trains']].append(r['elapsed_s'])
        print('\nSummary (mean ms per train count)')
        for n in sorted(by_n):
            ms = statistics.fmean(by_n[n]) * 1000
            print(f"  {n:>3}: {ms:8.2f} ms")


if __name__ == '__main__':
    main()
