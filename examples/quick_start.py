#!/usr/bin/env python3
"""
Quick Start - A persistent settings store in a few lines.

Usage:
    python examples/quick_start.py
"""

import tempfile

from mirrormap import Store


def main():
    data_dir = tempfile.mkdtemp()

    # Every guild starts from the same defaults
    settings = Store("settings", default={"prefix": "!", "admins": []}, data_dir=data_dir)
    settings.changed(lambda key, old, new: print(f"  changed {key}: {old} -> {new}"))

    print(f"guild1: {settings.get('guild1')}")
    settings.set("guild1", "?", "prefix")
    settings.push("guild1", "alice", "admins")
    settings.close()

    # Reopening the store loads what was written
    with Store("settings", data_dir=data_dir) as settings:
        print(f"guild1 after reopen: {settings.get('guild1')}")
        print(f"stored in {data_dir}")


if __name__ == "__main__":
    main()
