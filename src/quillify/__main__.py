"""Entry point for the 'python -m quillify' command."""

from quillify.cli import main

if __name__ == "__main__":
    main()
