"""
Codeward - Static Security Pattern Scanner
Rule-based vulnerability detection for JavaScript/TypeScript source trees.

Engine entry points live in codeward.core and codeward.scanners; they are
not re-exported here so that importing the package stays cheap for the CLI.
"""

__version__ = "1.2.0"
__author__ = "Codeward Contributors"
__license__ = "AGPL-3.0-or-later"

__all__ = ["__version__"]
