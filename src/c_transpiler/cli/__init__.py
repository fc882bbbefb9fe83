"""
C Transpiler Command-Line Interface
===================================

This package provides command-line tools for the C transpiler:

- **cfront**: parse preprocessed C, then dump tokens, the AST, or the
  regenerated source

The tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["cfront"]
