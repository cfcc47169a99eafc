#!/usr/bin/env python3
"""
CLI script to fetch, publish and watch configuration entries.

Usage:
    python run_watch.py get --group DEFAULT_GROUP --data-id app.yaml
    python run_watch.py publish --group DEFAULT_GROUP --data-id app.yaml --file app.yaml
    python run_watch.py watch --group DEFAULT_GROUP --data-id app.yaml
    python run_watch.py watch                 # Watch every entry listed in settings.yaml
"""

import argparse
import sys
import os
import threading

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nacos_watch.core.client import ConfigClient
from nacos_watch.core.settings import load_settings
from nacos_watch.exceptions import NacosWatchError
from nacos_watch.utils.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='nacos-watch - Configuration fetch/publish/watch client'
    )
    parser.add_argument(
        '--settings',
        type=str,
        default=None,
        help='Path to settings.yaml (default: config/settings.yaml)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)
    for name, help_text in (
        ('get', 'Print the content of one entry'),
        ('publish', 'Publish content for one entry'),
        ('watch', 'Print entries whenever they change'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('--namespace', type=str, default='', help='Namespace (tenant)')
        sub.add_argument('--group', type=str, default='DEFAULT_GROUP', help='Group')
        sub.add_argument('--data-id', type=str, required=(name != 'watch'), help='Entry id')
        if name == 'publish':
            source = sub.add_mutually_exclusive_group(required=True)
            source.add_argument('--content', type=str, help='Content to publish')
            source.add_argument('--file', type=str, help='File whose content to publish')
    return parser


def run_watch(client: ConfigClient, entries: list) -> None:
    """Register every entry and block until interrupted."""
    for entry in entries:
        data_id = entry['data_id']

        def on_change(content: str, data_id: str = data_id) -> None:
            print(f"--- {data_id} changed ---")
            print(content)

        handle = client.watch(
            entry.get('namespace', ''),
            entry.get('group', 'DEFAULT_GROUP'),
            data_id,
            on_change
        )
        print(f"Watching {data_id} (fingerprint {handle.last_fingerprint})")

    stop = threading.Event()
    try:
        stop.wait()
    except KeyboardInterrupt:
        print("\nStopping watches...")


def main():
    args = build_parser().parse_args()

    try:
        settings = load_settings(args.settings)
    except NacosWatchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    log_level = 'DEBUG' if args.verbose else settings.log_level
    setup_logging(level=log_level, format_str=settings.log_format)

    try:
        with ConfigClient(settings) as client:
            if args.command == 'get':
                print(client.get(args.namespace, args.group, args.data_id))

            elif args.command == 'publish':
                content = args.content
                if args.file:
                    with open(args.file, 'r', encoding='utf-8') as f:
                        content = f.read()
                client.publish(args.namespace, args.group, args.data_id, content)
                print(f"Published {args.data_id}")

            elif args.command == 'watch':
                if args.data_id:
                    entries = [{'namespace': args.namespace, 'group': args.group, 'data_id': args.data_id}]
                else:
                    entries = settings.watches
                if not entries:
                    print("Nothing to watch: pass --data-id or list entries in settings.yaml", file=sys.stderr)
                    return 2
                run_watch(client, entries)

    except NacosWatchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
