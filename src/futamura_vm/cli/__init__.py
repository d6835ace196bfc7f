"""
Futamura VM Command-Line Interface
==================================

- **fvm**: run the compiled-in program with a chosen dispatch variant

Implemented as a Click-based CLI application with help and error
reporting.
"""

__all__ = ["fvm"]
