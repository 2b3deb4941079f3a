import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from uic406.config import CompressionConfig
from uic406.core.compressor import compress_timetable
from uic406.core.headway import segment_headway
from uic406.store.loader import DataLoadError, read_config, read_repository
from uic406.store.writer import write_summary, write_timetable

logger = logging.getLogger("uic406")

BANNER = "\n******\nA railway timetable compression program implementing UIC leaflet code 406\n******\n"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="uic406-compress", description="Compress a railway timetable (UIC 406).")
    p.add_argument("--data", type=str, default=None, help="input data directory")
    p.add_argument("--solution", type=str, default=None, help="output directory")
    p.add_argument("--method", choices=["ean", "ilp"], default=None)
    p.add_argument("--strategy", choices=["topological", "stack"], default=None)
    p.add_argument("--output-level", type=int, default=None, help="> 0 writes debug traces")
    p.add_argument("--min-headway", type=int, default=None)
    p.add_argument("--time-window", type=int, default=None)
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    a = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if a.verbose > 1 else logging.INFO if a.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(BANNER)

    try:
        cfg = CompressionConfig()
        data_dir = Path(a.data or cfg.data_dir)
        cfg = cfg.with_overrides(read_config(data_dir))
    except ValueError as exc:
        print(f"Configuration reading error: {exc}", file=sys.stderr)
        return 1
    try:
        repository = read_repository(data_dir)
    except (OSError, DataLoadError) as exc:
        print(f"Fundamental data reading error: {exc}", file=sys.stderr)
        return 1
    cfg = cfg.with_overrides({
        "solution_dir": a.solution,
        "method": a.method,
        "strategy": a.strategy,
        "output_level": a.output_level,
        "min_headway": a.min_headway,
        "time_window": a.time_window,
    })

    logger.info("configuration: %s", cfg)

    solution_dir = Path(cfg.solution_dir)
    print(f"Compressing timetable...\nApplied method: {cfg.method}")
    try:
        result = compress_timetable(
            repository,
            method=cfg.method,
            strategy=cfg.strategy,
            headway=segment_headway(cfg.min_headway),
            output_level=cfg.output_level,
            debug_dir=solution_dir,
            time_window=cfg.time_window,
            milp_time_limit=cfg.milp_time_limit,
        )
    except ValueError as exc:
        # DataIntegrityError, or an unknown method/strategy
        print(f"Timetable compression aborted: {exc}", file=sys.stderr)
        return 1
    print("Timetable compression finished!")

    write_timetable(repository.trains, solution_dir)
    write_summary(result.summary, solution_dir)
    print("KPIs:", result.summary)
    print(f"Compressed timetable written to {solution_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
