#!/usr/bin/env python3
"""
ClawSentry command line.

    python -m clawsentry [--config PATH] [--base-dir DIR] <command>

Commands:
    serve                 API server plus enabled monitors, until Ctrl+C
    logs                  Today's entries as JSON
    scan [SKILL]          Scan every skill, or one by name
    policy show|set FILE  Read or replace the tool policy
    export json|csv       Export today's entries
    incident SESSION      Plain-text incident report for a session
"""

import argparse
import json
import logging
import sys
import threading
from pathlib import Path

from clawsentry.core.config import SentryConfig, load_config_from_file
from clawsentry.core.version import __version__
from clawsentry.fence.api_server import SECRET_HEADER, SentryAPIServer
from clawsentry.fence.orchestrator import SkillFence
from clawsentry.fence.query import SentryQueryService

__all__ = ['build_parser', 'build_config', 'main']

logger = logging.getLogger("clawsentry.cli")


def _add_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--limit', type=int, default=200)
    parser.add_argument('--severity', help='low, medium, high or critical')
    parser.add_argument('--tool')
    parser.add_argument('--session', dest='session_id')
    parser.add_argument('--minutes', type=float, help='Only entries from the last N minutes')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='clawsentry',
        description=f'ClawSentry v{__version__} - tool call fence and audit log')
    parser.add_argument('--config', help='Plugin-style JSON config file')
    parser.add_argument('--base-dir', help='Data directory (default: ~/.openclaw/clawsentry)')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the HTTP API and monitors')
    serve.add_argument('--host')
    serve.add_argument('--port', type=int)

    _add_filters(sub.add_parser('logs', help="Print today's entries"))

    scan = sub.add_parser('scan', help='Scan installed skills')
    scan.add_argument('skill', nargs='?')

    policy = sub.add_parser('policy', help='Show or replace the policy')
    policy_sub = policy.add_subparsers(dest='policy_command', required=True)
    policy_sub.add_parser('show')
    policy_set = policy_sub.add_parser('set')
    policy_set.add_argument('file')

    export = sub.add_parser('export', help="Export today's entries")
    export.add_argument('format', choices=['json', 'csv'])
    _add_filters(export)

    incident = sub.add_parser('incident', help='Incident report for a session')
    incident.add_argument('session')

    return parser


def build_config(args) -> SentryConfig:
    config = SentryConfig(base_dir=Path(args.base_dir)) if args.base_dir else SentryConfig()
    if args.config:
        load_config_from_file(config, Path(args.config))
    return config


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _filters(args) -> dict:
    return {
        'limit': args.limit,
        'severity': args.severity,
        'tool': args.tool,
        'session_id': args.session_id,
        'minutes': args.minutes,
    }


def _wait_for_interrupt() -> None:
    threading.Event().wait()


def _cmd_serve(fence: SkillFence, query: SentryQueryService, args) -> int:
    api = SentryAPIServer(
        query,
        host=args.host or fence.config.api_host,
        port=args.port if args.port is not None else fence.config.api_port,
    )
    if not api.start():
        return 1
    fence.start_monitors()

    print(f"ClawSentry API on http://{api.host}:{api.port}/clawsentry/logs")
    print(f"{SECRET_HEADER}: {api.api_secret}")
    sys.stdout.flush()

    try:
        _wait_for_interrupt()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        api.stop()
    return 0


def _cmd_policy(query: SentryQueryService, args) -> int:
    if args.policy_command == 'show':
        _print_json(query.get_policy())
        return 0

    try:
        text = Path(args.file).read_text(encoding='utf-8')
    except OSError as e:
        print(f"Cannot read {args.file}: {e}", file=sys.stderr)
        return 1
    result = query.set_policy(text)
    _print_json(result)
    return 0 if result['ok'] else 1


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format='[%(asctime)s] %(message)s')
    args = build_parser().parse_args(argv)
    config = build_config(args)

    fence = SkillFence(config)
    query = SentryQueryService(fence)
    try:
        if args.command == 'serve':
            return _cmd_serve(fence, query, args)

        if args.command == 'logs':
            _print_json(query.list_entries(**_filters(args)))

        elif args.command == 'scan':
            if args.skill:
                result = query.scan_one(args.skill)
                _print_json(result)
                if result['path'] is None:
                    print(f"Skill not found: {args.skill}", file=sys.stderr)
                    return 1
            else:
                _print_json(query.scan_all())

        elif args.command == 'policy':
            return _cmd_policy(query, args)

        elif args.command == 'export':
            if args.format == 'json':
                print(query.export_json(**_filters(args)))
            else:
                sys.stdout.write(query.export_csv(**_filters(args)))

        elif args.command == 'incident':
            print(query.incident_report(args.session)['report'])

        return 0
    finally:
        fence.close()


if __name__ == '__main__':
    sys.exit(main())
