"""
styleguard - style and convention checker for TypeScript, TSX and JavaScript.
"""

__version__ = "0.1.0"
