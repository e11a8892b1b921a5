import concurrent.futures
import datetime
import functools
import logging
import time
from typing import Optional, Tuple

from django.conf import settings

from venues.exceptions import VenueError

from .cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL_SECONDS, CacheEntry, QuoteResultCache
from .normalization import rebase_quote
from .registry import DEFAULT_VENUE_TIMEOUT, VenueRegistry, build_registry_from_settings
from .selector import select_best_quote
from .types import (
    EXCEPTION,
    TIMEOUT,
    AdapterResult,
    Failure,
    QuoteRequest,
    QuoteResponse,
    Success,
)

logger = logging.getLogger(__name__)


class Aggregator:
    """
    Fans a quote request out to every registered venue and ranks the answers.

    Each venue runs in its own worker thread with a deadline of ``timeout``
    seconds. Whatever happens inside a venue, exactly one AdapterResult per
    venue comes back, in registration order.
    """

    def __init__(
        self,
        registry: VenueRegistry,
        timeout: float = DEFAULT_VENUE_TIMEOUT,
        cache: Optional[QuoteResultCache] = None,
    ):
        self.registry = registry
        self.timeout = timeout
        self.cache = cache if cache is not None else QuoteResultCache()

    def get_quotes(self, request: QuoteRequest, use_cache: bool = True) -> QuoteResponse:
        """
        Full engine flow: cache lookup, fan-out on miss, store, select.

        Never raises for venue failures; when no venue can quote, the
        response carries ``best_quote=None`` and every venue's failure.
        """
        key = request.cache_key()
        cache_hit = False
        results = None

        if use_cache:
            entry = self.cache.get(key)
            if entry is not None:
                logger.info(f"Cache hit for {key}")
                results = self._results_for_request(entry, request)
                cache_hit = True

        if results is None:
            results = self.get_all_quotes(request)
            self.cache.put(key, results, request=request)

        best_quote = select_best_quote(results)
        if best_quote is None:
            logger.warning(
                f"No venue could quote {request.amount} {request.token_in} -> {request.token_out}"
            )
        else:
            logger.info(
                f"Best quote from {best_quote.chosen.venue_name}: "
                f"{best_quote.chosen.output_amount} "
                f"({best_quote.savings_percent}% better than worst of {best_quote.compared_against})"
            )

        return QuoteResponse(
            best_quote=best_quote,
            all_quotes=results,
            timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            cache_hit=cache_hit,
            request=request,
        )

    def get_all_quotes(self, request: QuoteRequest) -> Tuple[AdapterResult, ...]:
        """Query every venue concurrently; one result per venue, registration order."""
        venues = list(self.registry)
        if not venues:
            logger.warning("No venues registered, nothing to query")
            return ()

        logger.info(
            f"Aggregator: requesting quotes for {request.amount} "
            f"{request.token_in} -> {request.token_out} from {len(venues)} venues"
        )

        # One worker per venue so every venue starts at once and the shared
        # deadline is also each venue's individual bound.
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=len(venues), thread_name_prefix="venue"
        )
        start_time = time.monotonic()
        try:
            futures = [executor.submit(self._call_venue, venue, request) for venue in venues]
            concurrent.futures.wait(futures, timeout=self.timeout)
        finally:
            # Stragglers keep running in the background; their results are discarded.
            executor.shutdown(wait=False, cancel_futures=True)
        waited_ms = int((time.monotonic() - start_time) * 1000)

        results = []
        for venue, future in zip(venues, futures):
            if future.done() and not future.cancelled():
                results.append(future.result())
            else:
                logger.warning(f"{venue.name} timed out after {self.timeout}s")
                results.append(
                    AdapterResult(
                        venue_name=venue.name,
                        outcome=Failure(
                            reason=f"Timed out after {self.timeout} seconds",
                            error_type=TIMEOUT,
                        ),
                        elapsed_ms=waited_ms,
                    )
                )

        successful = sum(1 for r in results if r.success)
        logger.info(f"Aggregator: {successful}/{len(results)} venues returned quotes in {waited_ms}ms")
        return tuple(results)

    def _call_venue(self, venue, request: QuoteRequest) -> AdapterResult:
        start_time = time.monotonic()
        try:
            quote = venue.get_quote(request)
            outcome = Success(quote)
        except VenueError as e:
            logger.warning(f"{venue.name} failed: {e.message}")
            outcome = Failure(reason=e.message, error_type=e.error_type)
        except Exception as e:
            logger.exception(f"Error calling {venue.name}: {str(e)}")
            outcome = Failure(reason=f"Exception: {str(e)}", error_type=EXCEPTION)
        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        return AdapterResult(venue_name=venue.name, outcome=outcome, elapsed_ms=elapsed_ms)

    @staticmethod
    def _results_for_request(
        entry: CacheEntry, request: QuoteRequest
    ) -> Tuple[AdapterResult, ...]:
        """
        Serve cached results to ``request``.

        Entries produced for another slippage or user get their minimum
        output re-derived and their execution payload dropped.
        """
        if entry.produced_for(request):
            return entry.results
        return tuple(
            result.with_quote(rebase_quote(result.quote, request.slippage_tolerance_bps))
            if result.success
            else result
            for result in entry.results
        )


@functools.lru_cache(maxsize=None)
def get_aggregator() -> Aggregator:
    """Process-wide aggregator built from Django settings."""
    return Aggregator(
        registry=build_registry_from_settings(),
        timeout=getattr(settings, "QUOTE_VENUE_TIMEOUT", DEFAULT_VENUE_TIMEOUT),
        cache=QuoteResultCache(
            ttl_seconds=getattr(settings, "QUOTE_CACHE_TTL", DEFAULT_TTL_SECONDS),
            max_entries=getattr(settings, "QUOTE_CACHE_MAX_ENTRIES", DEFAULT_MAX_ENTRIES),
        ),
    )


def reset_aggregator() -> None:
    get_aggregator.cache_clear()
