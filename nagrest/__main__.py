"""
The primary entry point to the command line tool.
"""

from nagrest.cli import run

if __name__ == '__main__':
    run()
