from countries.management.commands._base import FetchCommand
from countries.queries import RegionQuery


class Command(FetchCommand):
    """
    Compute population statistics for n or all countries of one or more regions.

    Examples:
      python manage.py fetch_regions --name europe
      python manage.py fetch_regions --name africa asia -n 20
      python manage.py fetch_regions --name oceania --all --output oceania.json
    """

    help = "Get stats of n or all countries in one or more regions"
    default_limit = 10
    progress_desc = "Fetching regions"

    def add_arguments(self, parser):
        parser.add_argument(
            "--name",
            nargs="+",
            required=True,
            help="Region name(s)",
        )
        super().add_arguments(parser)

    def build_queries(self, options):
        return [RegionQuery(name) for name in options["name"]]

    def collect(self, values):
        return values
