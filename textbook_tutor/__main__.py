"""
Entry point for running the Textbook Tutor package as a module.

Run with:
    python -m textbook_tutor
"""

from textbook_tutor.interfaces.cli import main

if __name__ == "__main__":
    main()
