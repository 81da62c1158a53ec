try:
    from awsinv.cli.app import cli
except ModuleNotFoundError:
    # Fallback: ensure project root is on sys.path when run from a source checkout
    import os
    import sys

    sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
    from awsinv.cli.app import cli


def main():
    """Entry point for the aws-inventory CLI. Delegates to awsinv.cli.app:cli."""
    cli()


if __name__ == "__main__":
    main()
