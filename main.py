#!/usr/bin/env python3
"""
psv - Main Entry Point

Extracts pipe-delimited tables from Markdown-like text as JSON.

Usage:
    python main.py <file> [<file> ...] [--table N | --id ID] [--compact]
    cat notes.md | python main.py --id people

Run `python main.py --help` for all options.
"""

from psv.tables.cli import main


if __name__ == "__main__":
    main()
