#!/usr/bin/env python3
"""Convenience runner for the synthetic track generator.

Usage:
    python run.py --preset zipf_coverage --seed 7
"""
import sys

from track_synth.main import main

if __name__ == "__main__":
    sys.exit(main())
