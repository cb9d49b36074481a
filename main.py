"""Command-line entrypoint: runs snapframe.main from a source checkout."""

import sys

try:
    from snapframe.main import main
except Exception as exc:
    # Provide a clear error if imports fail due to PYTHONPATH issues
    raise RuntimeError("Failed to import snapframe. Ensure project root is on PYTHONPATH.") from exc


if __name__ == "__main__":
    sys.exit(main())
