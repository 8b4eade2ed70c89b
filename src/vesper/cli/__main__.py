"""Main entry point for the vesper CLI when run as a module."""

from vesper.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
