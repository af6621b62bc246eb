# main.py
"""
Entrypoint for the A4 Blend music player TUI
"""
import sys

from a4blend.cli_playback import run_tui

if __name__ == "__main__":
    run_tui(sys.argv[1] if len(sys.argv) > 1 else None)
