#!/usr/bin/env python3
"""
Civic Verify — Rich CLI Entry Point.

Usage:
    python main.py                    # Show commands
    python main.py preload            # Load the classifier
    python main.py verify hole.jpg -c road_damage -d "large pothole on Main Street"
    python main.py labels -c sanitation -d "overflowing bin"
    python main.py config
"""

from cli.app import app

if __name__ == "__main__":
    app()
