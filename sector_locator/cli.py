"""
CLI entry point for the sector-locate command.
"""
from sector_locator.runner import main

# Re-export main for the console_scripts entry point
__all__ = ['main']

if __name__ == '__main__':
    main()
