import asyncio
import argparse
import json
import logging
from core.engine import Engine
from core.context import SignalSnapshot
from core.hosts import group_external_hosts
from core.rules_validator import validate_store, print_validation_report
from core.ranking import CONFIDENCE_FLOOR
from fetch.collector import StaticCollector
from models.technology import SignalType
from rules.rules_loader import FingerprintStore, FINGERPRINTS_PATH


def _load_json_object(path: str, what: str, logger: logging.Logger):
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.error(f"{what} file not found: {path}")
        return None
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {what} file: {e}")
        return None
    if not isinstance(data, dict):
        logger.error(f"{what} file must contain a JSON object (dictionary)")
        return None
    return data


def main():
    parser = argparse.ArgumentParser(description="Website technology detection from fingerprint signatures")
    parser.add_argument("url", nargs="?", help="Target URL (e.g., https://example.com)")
    parser.add_argument("--snapshot", type=str, help="Path to a JSON signal snapshot collected elsewhere (skips fetching)")
    parser.add_argument("--fingerprints", type=str, default=FINGERPRINTS_PATH, help=f"Fingerprint database directory (default: {FINGERPRINTS_PATH})")
    parser.add_argument("--confidence-floor", type=int, default=CONFIDENCE_FLOOR, help=f"Minimum confidence to report (default: {CONFIDENCE_FLOOR})")
    parser.add_argument("--exclude", type=str, nargs="+", help="Exclude signal types (e.g., --exclude html dom)")
    parser.add_argument("--validate", action="store_true", help="Validate the fingerprint database and exit")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: INFO)")
    parser.add_argument("--headers-file", type=str, help="Path to JSON file containing additional HTTP headers (e.g., User-Agent, Cookie)")
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    store = FingerprintStore(args.fingerprints)

    if args.validate:
        print_validation_report(validate_store(store))
        return

    if not args.url and not args.snapshot:
        parser.error("a URL or --snapshot is required unless using --validate")

    signal_names = {s.value: s for s in SignalType}
    exclude = set()
    for name in args.exclude or []:
        if name not in signal_names:
            logger.error(f"Invalid signal type: {name}")
            logger.info(f"Available signal types: {', '.join(signal_names)}")
            return
        exclude.add(signal_names[name])

    custom_headers = {}
    if args.headers_file:
        custom_headers = _load_json_object(args.headers_file, "Headers", logger)
        if custom_headers is None:
            return
        logger.info(f"Loaded {len(custom_headers)} custom headers from {args.headers_file}")

    engine = Engine(store, exclude_signals=exclude, confidence_floor=args.confidence_floor)
    logger.info(f"Fingerprint database: {store.size()} technologies")

    if args.snapshot:
        data = _load_json_object(args.snapshot, "Snapshot", logger)
        if data is None:
            return
        result = engine.detect_technologies(SignalSnapshot.from_dict(data))
        print(json.dumps(result.to_dict(), indent=2))
        return

    async def run():
        collector = StaticCollector(store, headers=custom_headers)
        captures = []

        async def collect():
            capture = await collector.capture(args.url)
            captures.append(capture)
            return capture.snapshot

        logger.info(f"Fetching {args.url}...")
        result = await engine.collect_and_detect(collect)
        output = result.to_dict()
        output["technologies"] = group_external_hosts(captures[0].url, captures[0].requests) if captures else []
        print(json.dumps(output, indent=2))

    asyncio.run(run())


if __name__ == "__main__":
    main()
