#!/usr/bin/env python3
"""Convenience runner for the CrownBreaker client.

Usage:
    python run.py segments
"""
import logging

from crownbreaker.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    raise SystemExit(main())
