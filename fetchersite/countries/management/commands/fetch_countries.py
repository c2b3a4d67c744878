from countries.management.commands._base import FetchCommand
from countries.queries import CodeQuery, NameQuery


class Command(FetchCommand):
    """
    Fetch one or more countries by name or by code, concurrently.

    Examples:
      python manage.py fetch_countries --name chile peru
      python manage.py fetch_countries --name "united states" --fulltext
      python manage.py fetch_countries --code cl pe --output countries.json
      python manage.py fetch_countries --name guinea -n 3
      python manage.py fetch_countries --name guinea --all --no-progress
    """

    help = "Get info about one or multiple countries by name or country code"
    default_limit = 1
    progress_desc = "Fetching countries"

    def add_arguments(self, parser):
        parser.add_argument(
            "--name",
            nargs="+",
            default=[],
            help="Country name(s)",
        )
        parser.add_argument(
            "--code",
            nargs="+",
            default=[],
            help="Country code(s), alpha-2 or alpha-3",
        )
        parser.add_argument(
            "--fulltext",
            action="store_true",
            help="Match names exactly instead of by substring",
        )
        super().add_arguments(parser)

    def build_queries(self, options):
        queries = [NameQuery(name, options["fulltext"]) for name in options["name"]]
        queries.extend(CodeQuery(code) for code in options["code"])
        return queries

    def collect(self, values):
        # Each value is the country list of one query
        return [country for countries in values for country in countries]
