"""Package entry point for ``python -m caption_editor``.

Delegates to the CLI's main() function.
"""

from caption_editor.cli import main

if __name__ == "__main__":
    main()
