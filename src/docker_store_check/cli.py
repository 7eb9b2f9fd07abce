#!/usr/bin/env python3
"""
Command-line interface for the Docker store checker.
"""

import argparse
import sys

from docker_store_check.core import StoreCheckError, check_store
from docker_store_check.docker import DEFAULT_DATA_ROOT, DockerStore


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Check the layer store of a stopped Docker daemon and optionally remove broken layers'
    )
    parser.add_argument(
        '--data-root',
        default=DEFAULT_DATA_ROOT,
        help='A path to docker data root'
    )
    parser.add_argument(
        '--fix-store',
        action='store_true',
        help='A flag to turn ON store fixing (removes broken layers)'
    )
    args = parser.parse_args(argv)

    store = DockerStore(args.data_root)
    try:
        count = check_store(store, args.fix_store)
    except StoreCheckError as e:
        print(f"failed to check Docker Store: {e}", file=sys.stderr)
        sys.exit(1)

    if args.fix_store:
        print(f"fixed {count} layers")


if __name__ == "__main__":
    main()
