from typing import Any, Iterable, List
import logging

from django.core.management.base import BaseCommand, CommandError

from tqdm import tqdm

from countries.exceptions import CallerContractError, ConfigError, OutputError
from countries.services.api_client import APIClient
from countries.services.config import FetcherConfig
from countries.services.dispatcher import Dispatcher, FetchResult
from countries.services.output import to_json

logger = logging.getLogger(__name__)


class FetchCommand(BaseCommand):
    """
    Shared plumbing for the fetch commands: config, dispatch, drain, output.
    Subclasses build the queries and shape the successful results.
    """

    default_limit = 1
    progress_desc = "Fetching"

    def add_arguments(self, parser):
        parser.add_argument(
            "-n",
            type=int,
            default=self.default_limit,
            dest="n",
            help="Maximum number of countries per query. A non-positive value means all.",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="Fetch all matching countries. Takes precedence over -n.",
        )
        parser.add_argument(
            "--output",
            "-o",
            default=None,
            help="Write JSON to this file instead of stdout",
        )
        parser.add_argument(
            "--no-progress",
            action="store_true",
            help="Disable progress bar output (CI-friendly)",
        )

    # -----------------------------
    # hooks
    # -----------------------------
    def build_queries(self, options) -> List[Any]:
        raise NotImplementedError

    def collect(self, values: List[Any]) -> Any:
        raise NotImplementedError

    def get_client(self, config: FetcherConfig) -> APIClient:
        return APIClient(config)

    # -----------------------------
    # core processing
    # -----------------------------
    def drain(self, results: Iterable[FetchResult], total: int, show_progress: bool):
        """
        Consume the result stream, reporting failures and keeping going.
        Returns the successful values in completion order.
        """
        values = []
        failed = 0

        iterator = results
        if show_progress:
            iterator = tqdm(results, total=total, desc=self.progress_desc)

        for result in iterator:
            if result.ok:
                values.append(result.value)
                continue
            failed += 1
            logger.warning("Query %s failed: %s", result.query, result.error)
            self.stderr.write(
                self.style.WARNING(f"Failed to fetch {result.query}: {result.error}")
            )

        logger.info("Batch finished: %s succeeded, %s failed", len(values), failed)
        return values

    # -----------------------------
    # command entrypoint
    # -----------------------------
    def handle(self, *args, **options):
        try:
            config = FetcherConfig.from_settings()
        except ConfigError as e:
            raise CommandError(f"Invalid configuration: {e}")
        config.apply_log_level()

        limit = -1 if options["all"] else options["n"]
        queries = self.build_queries(options)
        if not queries:
            raise CommandError("Nothing to fetch")

        dispatcher = Dispatcher(self.get_client(config))
        try:
            results = dispatcher.dispatch(queries, limit)
        except CallerContractError as e:
            raise CommandError(str(e))

        values = self.drain(
            results, total=len(queries), show_progress=not options["no_progress"]
        )
        if not values:
            raise CommandError("All queries failed; nothing to output")

        output = options["output"]
        try:
            to_json(
                self.collect(values),
                filename=output,
                prefix=config.json_prefix,
                indent=config.json_indent,
                permission=config.json_file_permission,
                force_override=config.json_force_override,
                stream=self.stdout,
            )
        except OutputError as e:
            raise CommandError(str(e))

        if output:
            self.stdout.write(
                self.style.SUCCESS(f"Wrote {len(values)} result(s) to {output}")
            )
