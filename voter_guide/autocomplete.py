"""
Debounced address autocomplete.

This module provides the Debouncer task abstraction and the
AutocompleteService that turns keystrokes in the address field into
suggestion lists, using the address dataset when it already knows the input
and the geocoding proxy otherwise.
"""

import logging
import threading
from typing import Callable, List, Optional

from .config import ResolverConfig
from .models import LookupState, Prediction
from .utils.error_handler import create_error_context, log_error_details
from .utils.normalizers import normalize_address_key


class Debouncer:
    """
    Runs only the last of a burst of submissions, after a quiet period.

    Each submission cancels the pending one. A submission whose timer has
    already fired cannot be cancelled; `is_current` lets its callback detect
    that it was superseded.
    """

    def __init__(self, delay: float):
        """
        Initialize the debouncer.

        Args:
            delay: Quiet period in seconds
        """
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    def submit(self, func: Callable[..., None], *args) -> int:
        """
        Schedule func(generation, *args) after the quiet period, replacing any
        pending call. The generation is passed in so the callback can check
        `is_current` even if it runs before submit returns.

        Returns:
            Generation number of this submission
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            self._timer = threading.Timer(self.delay, func, args=(generation,) + tuple(args))
            self._timer.daemon = True
            self._timer.start()
        return generation

    def cancel(self):
        """Cancel the pending call, if any, and supersede running ones."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    def is_current(self, generation: int) -> bool:
        """Check whether a submission is still the latest one."""
        return generation == self._generation

    def wait(self, timeout: Optional[float] = None):
        """Block until the latest scheduled call has run (or was cancelled)."""
        timer = self._timer
        if timer is not None:
            timer.join(timeout)


class AutocompleteService:
    """
    Keeps the suggestion list for the address field up to date.

    The suggestion slot is always replaced as a whole; a response that
    arrives for a superseded keystroke is dropped.
    """

    def __init__(self, lookup_state: LookupState, geocoder=None,
                 config: Optional[ResolverConfig] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the autocomplete service.

        Args:
            lookup_state: Session lookup data (for the address dataset)
            geocoder: Object with an autocomplete(query, country) method; None
                limits suggestions to address dataset hits
            config: Resolver configuration
            logger: Optional logger instance
        """
        self.lookup = lookup_state
        self.geocoder = geocoder
        self.config = config or ResolverConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.debouncer = Debouncer(self.config.debounce_seconds)
        self.suggestions: List[Prediction] = []

    def on_input(self, value: str,
                 callback: Optional[Callable[[List[Prediction]], None]] = None):
        """
        Handle one change of the address field.

        Short input clears the suggestions at once and an address dataset hit
        is answered at once; anything else is looked up after the debounce
        period, superseding earlier pending lookups.

        Args:
            value: Current field contents
            callback: Called with the new suggestion list when it changes
        """
        if len(value) < self.config.min_autocomplete_length:
            self.debouncer.cancel()
            self._publish([], callback)
            return

        local = self._dataset_suggestions(value)
        if local:
            self.debouncer.cancel()
            self._publish(local, callback)
            return

        def run(generation: int):
            predictions = self.suggest(value)
            if self.debouncer.is_current(generation):
                self._publish(predictions, callback)
            else:
                self.logger.debug(f"Dropping superseded suggestions for {value!r}")

        self.debouncer.submit(run)

    def suggest(self, value: str) -> List[Prediction]:
        """
        Compute suggestions for a value without debouncing.

        Failures of the geocoding proxy are logged and give no suggestions.

        Args:
            value: Partial address

        Returns:
            Suggestions in provider order
        """
        if len(value) < self.config.min_autocomplete_length:
            return []

        local = self._dataset_suggestions(value)
        if local:
            return local

        if self.geocoder is None:
            return []

        try:
            predictions = self.geocoder.autocomplete(value, self.config.country_code)
        except Exception as e:
            context = create_error_context(operation="autocomplete", query=value)
            log_error_details(self.logger, e, context)
            return []

        return [Prediction.from_mapping(p) for p in predictions if isinstance(p, dict)]

    def _dataset_suggestions(self, value: str) -> List[Prediction]:
        index = self.lookup.address_index
        if index and normalize_address_key(value, self.config.address_qualifiers) in index:
            return [Prediction(description=value)]
        return []

    def _publish(self, predictions: List[Prediction], callback):
        self.suggestions = list(predictions)
        if callback is not None:
            callback(self.suggestions)
