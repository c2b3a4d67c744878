import os
import sys


def main(argv=None):
    """Entry point for the country-fetcher console script."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "fetchersite.settings")
    from django.core.management import execute_from_command_line

    execute_from_command_line(argv if argv is not None else sys.argv)


if __name__ == "__main__":
    main()
