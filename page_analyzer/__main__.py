"""
Module entry point for: python -m page_analyzer

Allows running the analyzer directly as a module:
    python -m page_analyzer analyze <file> [<file> ...] [options]
    python -m page_analyzer position <file>
    python -m page_analyzer inspect <json_path>
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
