"""
CLI Module

Architectural Intent:
- Command-line interface for Stratus
- Entry point for all user interactions
- Delegates to application use cases via composition root
- Supports --verbose/--debug flags for log level control
"""

import argparse
import asyncio
import logging
import sys
import traceback
from pathlib import Path

from stratus.application.dtos.operation_dtos import (
    DeployServiceRequest,
    DestroyServiceRequest,
)
from stratus.domain.errors import OperationFailure
from stratus.infrastructure.config import load_config
from stratus.infrastructure.logging import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Stratus: Cloud Run account credentials and deployments"
    )
    parser.add_argument(
        "--config-file", "-f", default=None, help="Path to stratus.json"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "accounts", help="Load account credentials once and list them"
    )

    deploy_parser = subparsers.add_parser(
        "deploy", help="Replace Cloud Run services from service config files"
    )
    deploy_parser.add_argument("--account", "-a", required=True, help="Account name")
    deploy_parser.add_argument(
        "--config",
        "-c",
        action="append",
        default=[],
        dest="configs",
        help="Service config file (repeatable)",
    )
    deploy_parser.add_argument(
        "--app-root",
        default=None,
        help="Application directory, relative to the account's local repository",
    )

    destroy_parser = subparsers.add_parser(
        "destroy", help="Delete a Cloud Run service"
    )
    destroy_parser.add_argument("--account", "-a", required=True, help="Account name")
    destroy_parser.add_argument("--service", "-s", required=True, help="Service name")

    watch_parser = subparsers.add_parser(
        "watch", help="Keep account credentials refreshed until interrupted"
    )
    watch_parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds instead of running until interrupted",
    )
    return parser


def _fail(message: str, verbose: bool) -> None:
    print(f"[-] {message}")
    if verbose:
        traceback.print_exc()
    sys.exit(1)


async def _accounts(container, verbose: bool) -> None:
    snapshot = await container.poller.synchronize()
    if container.poller.last_error is not None:
        _fail(f"Could not load accounts: {container.poller.last_error}", verbose)
    if not len(snapshot):
        print("[*] No accounts loaded.")
    for name in snapshot.names():
        credential = snapshot[name]
        print(
            f"[+] {name} project={credential.project or '-'} "
            f"region={credential.region} type={credential.account_type}"
        )
    for name in snapshot.failed_accounts:
        print(f"[-] {name} failed to load")


async def _deploy(container, args, verbose: bool) -> None:
    try:
        payloads = [Path(p).read_text() for p in args.configs]
    except OSError as e:
        _fail(f"Config file not readable: {e}", verbose)
        return

    await container.poller.synchronize()
    request = DeployServiceRequest(
        account=args.account,
        config_payloads=tuple(payloads),
        application_directory_root=args.app_root,
    )
    print(f"[*] Deploying {len(payloads)} config file(s) to {args.account}...")
    try:
        outcome = await container.deploy_service.execute(request)
    except OperationFailure as e:
        _fail(f"Deployment Failed: {e}", verbose)
        return
    if outcome.output:
        print(outcome.output)
    print(f"[+] Deployment Successful (task {outcome.task_id}).")


async def _destroy(container, args, verbose: bool) -> None:
    await container.poller.synchronize()
    request = DestroyServiceRequest(account=args.account, service_name=args.service)
    print(f"[*] Destroying {args.service} in {args.account}...")
    try:
        outcome = await container.destroy_service.execute(request)
    except OperationFailure as e:
        _fail(f"Destroy Failed: {e}", verbose)
        return
    if outcome.output:
        print(outcome.output)
    print(f"[+] Destroy Successful (task {outcome.task_id}).")


async def _watch(container, args) -> None:
    print(
        f"[*] Watching accounts every {container.poller.interval_seconds}s. "
        "Press Ctrl+C to stop."
    )
    await container.poller.start()
    try:
        if args.duration is not None:
            await asyncio.sleep(args.duration)
        else:
            await asyncio.Event().wait()
    finally:
        await container.poller.stop()
        print("[*] Stopped watching accounts.")


async def async_main():
    parser = _build_parser()
    args = parser.parse_args()

    config = load_config(args.config_file)

    # Configure logging based on flags
    if args.debug:
        configure_logging(level=logging.DEBUG, json_format=config.log_json)
    elif args.verbose:
        configure_logging(level=logging.INFO, json_format=config.log_json)
    else:
        configure_logging(level=config.log_level, json_format=config.log_json)

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help()
        return

    from stratus.composition_root import create_container

    container = create_container(config)
    await container.telemetry.initialize()
    try:
        if args.command == "accounts":
            await _accounts(container, verbose)
        elif args.command == "deploy":
            await _deploy(container, args, verbose)
        elif args.command == "destroy":
            await _destroy(container, args, verbose)
        elif args.command == "watch":
            await _watch(container, args)
    finally:
        await container.telemetry.export()


def main():
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        print("\n[*] Interrupted.")


if __name__ == "__main__":
    main()
