"""
Run a CHIP-8 ROM: ``python main.py path/to/rom.ch8 [--headless --frames N]``
"""

import sys

from chip8vm.host import main

if __name__ == "__main__":
    sys.exit(main())
