"""Smoke run: size a filter, measure it and report its serialized footprint."""

import argparse
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from bloomcore.config import BloomConfig, ConfigLoader
from bloomcore.evaluation import Evaluator
from bloomcore.serialization import dumps, encode_filter


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="bloomcore", description=__doc__)
    parser.add_argument("--config", type=Path, help="YAML file with filter/evaluation sections")
    parser.add_argument("--element", action="append", default=[], help="element to insert")
    return parser.parse_args(argv)


def run_demo(config: BloomConfig, elements: Sequence[str] = ()) -> None:
    result = Evaluator(config.evaluation)(config.filter.build)
    logger.info(
        "Measured fp_rate={:.4%} (configured {:.4%}) | fn_rate={:.4%} | fill={:.3f}",
        result.false_positive_rate,
        result.configured_error_rate,
        result.false_negative_rate,
        result.mean_fill_ratio,
    )

    with config.filter.build() as bloom:
        for element in elements or ("one", "two"):
            logger.info("add({!r}) -> {}", element, bloom.add(element))
        payload = encode_filter(bloom)
        logger.info("{}", bloom)
        logger.info(
            "Wire payload: {}B for {} bits ({})",
            len(payload.payload),
            payload.length,
            "brotli" if payload.compressed else "raw",
        )
        logger.info("JSON document: {} characters", len(dumps(bloom)))


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    config = ConfigLoader().load(args.config) if args.config else BloomConfig()
    run_demo(config, args.element)


if __name__ == "__main__":
    main()
