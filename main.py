"""
Main entry point script for PyArmSim.

This script serves as the executable entry point when running
PyArmSim from the command line.
"""

import sys
from pyarmsim.main import main

if __name__ == "__main__":
    sys.exit(main())
