#!/usr/bin/env python3
"""
Codeward module entry point
Allows running: python3 -m codeward
"""

from codeward.cli import main

if __name__ == '__main__':
    main()
