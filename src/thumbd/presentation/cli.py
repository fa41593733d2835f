"""CLI interface for the thumbnail worker."""

import argparse
import json
import signal
import sys
from pathlib import Path
from typing import List, Optional

from thumbd import __version__
from thumbd.application.factories import WorkerFactory
from thumbd.domain.exceptions import ConfigurationError, DecodeError, DomainException
from thumbd.domain.models import Job, ThumbnailDescription
from thumbd.infrastructure.config import ConfigLoader
from thumbd.shared.logging import setup_logger, get_logger


def _load_json(path: Path):
    try:
        return json.loads(Path(path).read_text(encoding='utf-8'))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e


def _install_signal_handlers(consumer, logger) -> None:
    def handle(signum, frame):
        logger.info(f"Received signal {signum}, stopping after the current message")
        consumer.stop()

    signal.signal(signal.SIGINT, handle)
    signal.signal(signal.SIGTERM, handle)


def cmd_server(factory: WorkerFactory, args, logger) -> int:
    """Run the consumer loop until stopped."""
    consumer = factory.create_consumer()
    _install_signal_handlers(consumer, logger)

    logger.info("=" * 60)
    logger.info(f"thumbd v{__version__}")
    logger.info(f"Queue: {factory.config.sqs_queue_url or factory.config.sqs_queue}")
    logger.info(f"Storage: {factory.config.storage}")
    logger.info(f"Scratch dir: {factory.config.tmp_dir}")
    logger.info("=" * 60)

    try:
        consumer.run()
    finally:
        factory.metrics.log_summary(logger)
    return 0


def cmd_thumbnail(factory: WorkerFactory, args, logger) -> int:
    """Enqueue a job for a remote image."""
    raw_descriptions = _load_json(args.descriptions)
    if not isinstance(raw_descriptions, list):
        raise ConfigurationError(f"{args.descriptions} must contain a JSON list of descriptions")

    try:
        job = Job(
            original=args.remote_image,
            descriptions=tuple(ThumbnailDescription.from_dict(d) for d in raw_descriptions)
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid job: {e}") from e

    message_id = factory.create_queue().send(job, base64=args.base64)
    print(message_id)
    return 0


def cmd_run(factory: WorkerFactory, args, logger) -> int:
    """Run one job file through the pipeline, bypassing the queue."""
    try:
        job = Job.from_dict(_load_json(args.job))
    except ValueError as e:
        raise ConfigurationError(f"Invalid job in {args.job}: {e}") from e

    result = factory.create_pipeline().run(job)
    for rendition in result.renditions:
        status = "ok" if rendition.success else f"FAILED ({rendition.stage}: {rendition.error})"
        print(f"{rendition.key}: {status}")
    if result.stage:
        print(f"{job.original}: FAILED ({result.stage}: {result.error})")
    return 0 if result.success else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="thumbd", description="Queue-driven thumbnail worker")
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--config', type=Path, help='Config YAML file (default: thumbd.yaml)')
    common.add_argument('--storage', choices=['s3', 'local'], help='Storage backend')
    common.add_argument('--local-root', type=Path, help='Root directory for local storage')
    common.add_argument('--tmp-dir', type=Path, help='Scratch directory')
    common.add_argument('--log-file', type=Path, help='Also write logs to this file')
    common.add_argument('--verbose', '-v', action='store_true', help='Verbose')

    subparsers = parser.add_subparsers(dest='command', required=True)

    server = subparsers.add_parser('server', parents=[common], help='Consume thumbnail jobs forever')
    server.add_argument('--queue', help='SQS queue name')
    server.set_defaults(handler=cmd_server)

    thumbnail = subparsers.add_parser('thumbnail', parents=[common], help='Enqueue a thumbnail job')
    thumbnail.add_argument('--remote-image', required=True, help='Key or URL of the original image')
    thumbnail.add_argument('--descriptions', type=Path, required=True, help='JSON file with descriptions')
    thumbnail.add_argument('--queue', help='SQS queue name')
    thumbnail.add_argument('--base64', action='store_true', help='Base64-wrap the message body')
    thumbnail.set_defaults(handler=cmd_thumbnail)

    run = subparsers.add_parser('run', parents=[common], help='Run one job file without the queue')
    run.add_argument('--job', type=Path, required=True, help='JSON file with the job')
    run.set_defaults(handler=cmd_run)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    overrides = {
        'storage': args.storage,
        'local_root': args.local_root,
        'tmp_dir': args.tmp_dir,
        'sqs_queue': getattr(args, 'queue', None),
    }
    if args.verbose:
        overrides['log_level'] = 'DEBUG'

    bootstrap = get_logger('thumbd.cli')

    try:
        config = ConfigLoader(config_path=args.config).load(overrides=overrides)
    except ConfigurationError as e:
        setup_logger('thumbd')
        bootstrap.error(f"Configuration error: {e}")
        return 2

    setup_logger('thumbd', level=config.log_level, log_file=args.log_file)
    logger = get_logger('thumbd.cli')

    try:
        return args.handler(WorkerFactory(config), args, logger)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except DecodeError as e:
        logger.critical(f"Fatal: {e}")
        return 3
    except DomainException as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
