#!/usr/bin/env python3
"""
Entry point for running Screenshooter from a source checkout.

    python main.py upload ~/Pictures/Screenshot.png
    python main.py save capture.png --no-dialog
"""
import sys

from screenshooter.application.app import main

if __name__ == "__main__":
    sys.exit(main())
