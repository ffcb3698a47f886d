"""
Resilient element interaction for a page that re-renders under the test.

Every logical UI operation is expressed as an ordered list of ``Strategy``
objects and run through ``locate_and_act``: the first strategy whose locate
step yields a ready element and whose act step completes wins. Recoverable
failures (stale handles, intercepted clicks, elements not ready) fall through
to the next strategy; anything else propagates.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from pricecheck.utils.errors import ElementNotInteractable, NoInteractableElementFound
from pricecheck.utils.timeout_manager import TimeoutManager

logger = logging.getLogger(__name__)

PRESENT = "present"
VISIBLE = "visible"
CLICKABLE = "clickable"
CONDITIONS = (PRESENT, VISIBLE, CLICKABLE)

DEFAULT_TIMEOUT_S = 15
DEFAULT_POLL_INTERVAL_S = 0.25
DEFAULT_MAX_ATTEMPTS = 3


@dataclass
class Strategy:
    """One way to find an element and act on it."""
    name: str
    locate: Callable[[], Sequence[Any]]
    act: Callable[[Any], Any]
    # Overrides the wait budget of locate_and_act for this strategy only
    timeout_s: Optional[float] = None


@dataclass
class ActionOutcome:
    succeeded: bool
    strategy_index: int
    strategy_name: str
    value: Any = None
    attempted: int = 0


def readiness_check(driver: Any, condition: str) -> Callable[[Any], bool]:
    """Build the element predicate for ``present`` / ``visible`` / ``clickable``."""
    if condition not in CONDITIONS:
        raise ValueError(f"Unknown wait condition: {condition}")
    if condition == PRESENT:
        return lambda element: element is not None
    if condition == VISIBLE:
        return lambda element: driver.is_displayed(element)
    return lambda element: driver.is_displayed(element) and driver.is_enabled(element)


def locate_and_act(
    strategies: Sequence[Strategy],
    is_ready: Optional[Callable[[Any], bool]] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    operation: str = "interaction",
    timeout_factory: Callable[..., TimeoutManager] = TimeoutManager,
) -> ActionOutcome:
    """
    Try each strategy in order until one succeeds.

    Args:
        strategies: Ordered candidates; index 0 is tried first
        is_ready: Predicate an element must satisfy before it is acted on
        timeout_s: Wait budget for each locate attempt
        poll_interval_s: Delay between locate polls
        operation: Name used in logs and in the final error
        timeout_factory: Builds the per-attempt TimeoutManager

    Returns:
        ActionOutcome naming the winning strategy and its act() result

    Raises:
        NoInteractableElementFound: every strategy was tried and none succeeded
    """
    ready = is_ready or (lambda element: element is not None)
    last_error: Optional[BaseException] = None
    attempted = 0

    for index, strategy in enumerate(strategies):
        attempted += 1
        budget = strategy.timeout_s if strategy.timeout_s is not None else timeout_s
        waiter = timeout_factory(budget, poll_interval_s)

        def _ready_elements() -> List[Any]:
            return [element for element in strategy.locate() if ready(element)]

        elements = waiter.poll_until(_ready_elements, f"{operation} via {strategy.name}")
        if not elements:
            logger.debug(f"{operation}: strategy {index} ({strategy.name}) found no ready element within {budget}s")
            continue

        try:
            value = strategy.act(elements[0])
        except ElementNotInteractable as e:
            last_error = e
            logger.debug(f"{operation}: strategy {index} ({strategy.name}) failed: {e}")
            continue

        logger.info(f"{operation}: succeeded with strategy {index} ({strategy.name})")
        return ActionOutcome(
            succeeded=True,
            strategy_index=index,
            strategy_name=strategy.name,
            value=value,
            attempted=attempted,
        )

    logger.error(f"{operation}: all {attempted} strategies exhausted")
    raise NoInteractableElementFound(attempted, operation, last_error)


def click_strategies(driver: Any, element: Any) -> List[Strategy]:
    """The click chain: direct, script-injected, pointer move + click, enclosing control."""

    def _direct(el: Any) -> str:
        driver.scroll_into_view(el)
        driver.click(el)
        return "direct"

    def _script(el: Any) -> str:
        driver.force_click(el)
        return "script"

    def _pointer(el: Any) -> str:
        driver.hover_click(el)
        return "pointer"

    def _parent(el: Any) -> str:
        parent = driver.parent_control(el)
        if parent is None:
            raise ElementNotInteractable("no enclosing button or link")
        driver.click(parent)
        return "parent"

    target = lambda: [element]
    return [
        Strategy("direct click", target, _direct),
        Strategy("script click", target, _script),
        Strategy("pointer click", target, _pointer),
        Strategy("enclosing control click", target, _parent),
    ]


def resilient_click(driver: Any, element: Any, operation: str = "click") -> ActionOutcome:
    """Click an already-located element, falling back through the click chain."""
    return locate_and_act(click_strategies(driver, element), timeout_s=0, operation=operation)


class ResilientInteractor:
    """Binds the strategy combinator to one session's driver and configured waits."""

    def __init__(self,
                 driver: Any,
                 timeout_s: float = DEFAULT_TIMEOUT_S,
                 poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
                 max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                 timeout_factory: Callable[..., TimeoutManager] = TimeoutManager):
        self.driver = driver
        self.timeout_s = timeout_s
        self.poll_interval_s = poll_interval_s
        self.max_attempts = max(1, max_attempts)
        self.timeout_factory = timeout_factory

    @classmethod
    def from_settings(cls, driver: Any) -> "ResilientInteractor":
        from pricecheck.config import settings

        attempts = settings.get_max_retry_attempts() if settings.is_retry_enabled() else 1
        return cls(
            driver,
            timeout_s=settings.get_explicit_timeout_s(),
            poll_interval_s=settings.get_poll_interval_s(),
            max_attempts=attempts,
        )

    def _waiter(self, timeout_s: Optional[float] = None) -> TimeoutManager:
        return self.timeout_factory(self.timeout_s if timeout_s is None else timeout_s, self.poll_interval_s)

    def locate_and_act(self, strategies: Sequence[Strategy], condition: str = VISIBLE,
                       operation: str = "interaction") -> ActionOutcome:
        return locate_and_act(
            strategies,
            is_ready=readiness_check(self.driver, condition),
            timeout_s=self.timeout_s,
            poll_interval_s=self.poll_interval_s,
            operation=operation,
            timeout_factory=self.timeout_factory,
        )

    # Waits
    def wait_for_elements(self, selector: str, timeout_s: Optional[float] = None,
                          condition: str = PRESENT) -> List[Any]:
        """All elements matching ``selector`` once at least one satisfies ``condition``; [] on timeout."""
        ready = readiness_check(self.driver, condition)

        def _found() -> List[Any]:
            elements = self.driver.find_elements(selector)
            return elements if any(ready(e) for e in elements) else []

        return self._waiter(timeout_s).poll_until(_found, f"elements {selector}") or []

    def is_displayed(self, selector: str, timeout_s: float = 5) -> bool:
        return bool(self.wait_for_elements(selector, timeout_s, condition=VISIBLE))

    def wait_until_gone(self, selector: str, timeout_s: Optional[float] = None) -> bool:
        """True once no element matching ``selector`` is displayed."""

        def _gone() -> bool:
            return not any(self.driver.is_displayed(e) for e in self.driver.find_elements(selector))

        return bool(self._waiter(timeout_s).poll_until(_gone, f"{selector} to disappear"))

    def wait_for_loader(self, selector: str, appear_timeout_s: float = 2, timeout_s: Optional[float] = None) -> bool:
        """Wait out a loading overlay that may or may not show up."""
        if not self.wait_for_elements(selector, appear_timeout_s, condition=VISIBLE):
            logger.debug(f"No loader detected: {selector}")
            return True
        gone = self.wait_until_gone(selector, timeout_s)
        if not gone:
            logger.warning(f"Loader still visible after timeout: {selector}")
        return gone

    # Actions
    def click(self, element: Any, operation: str = "click") -> ActionOutcome:
        return resilient_click(self.driver, element, operation)

    def _click_act(self, operation: str) -> Callable[[Any], Any]:
        def _act(element: Any) -> str:
            try:
                return self.click(element, operation).value
            except NoInteractableElementFound as e:
                raise ElementNotInteractable(str(e)) from e
        return _act

    def click_first(self, selectors: Sequence[str], operation: str = "click",
                    timeout_s: Optional[float] = None) -> ActionOutcome:
        """One strategy per selector; each located element goes through the click chain."""
        strategies = [
            Strategy(selector, self._finder(selector), self._click_act(operation), timeout_s)
            for selector in selectors
        ]
        return self.locate_and_act(strategies, condition=CLICKABLE, operation=operation)

    def read_text_first(self, selectors: Sequence[str], accept: Callable[[str], bool] = bool,
                        operation: str = "read text", timeout_s: Optional[float] = None) -> ActionOutcome:
        """Text of the first displayed element (across selectors, in order) that ``accept`` approves."""

        def _locate_accepted(selector: str) -> Callable[[], List[Any]]:
            def _locate() -> List[Any]:
                return [e for e in self.driver.find_elements(selector) if accept(self.driver.text(e))]
            return _locate

        strategies = [
            Strategy(selector, _locate_accepted(selector), self.driver.text, timeout_s)
            for selector in selectors
        ]
        return self.locate_and_act(strategies, condition=VISIBLE, operation=operation)

    def type_into(self, selectors: Sequence[str], text: str, operation: str = "type",
                  clear: bool = True) -> ActionOutcome:
        def _type(element: Any) -> None:
            if clear:
                self.driver.clear_and_type(element, text)
            else:
                self.driver.send_keys(element, text)

        strategies = [Strategy(selector, self._finder(selector), _type) for selector in selectors]
        return self.locate_and_act(strategies, condition=CLICKABLE, operation=operation)

    def press(self, selectors: Sequence[str], key: str, operation: str = "press key") -> ActionOutcome:
        strategies = [
            Strategy(selector, self._finder(selector), lambda element: self.driver.press(element, key))
            for selector in selectors
        ]
        return self.locate_and_act(strategies, condition=PRESENT, operation=operation)

    def select_from_list(self,
                         selector: str,
                         matches: Callable[[str], bool],
                         before_click: Optional[Callable[[], None]] = None,
                         operation: str = "select option") -> Optional[str]:
        """
        Click the first option of a re-rendering list whose text ``matches``.

        The list is re-resolved before every index access. If an index has
        disappeared the pass is abandoned and the next outer attempt starts;
        click failures likewise consume one attempt.

        Returns:
            Text of the option clicked, or None if nothing matched
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                options = self.wait_for_elements(selector, condition=PRESENT)
                logger.info(f"{operation}: {len(options)} options available (attempt {attempt})")
                abandoned = False
                for position in range(len(options)):
                    options = self.driver.find_elements(selector)
                    if position >= len(options):
                        abandoned = True
                        break
                    option = options[position]
                    label = self.driver.text(option)
                    logger.debug(f"{operation}: checking option {label!r}")
                    if matches(label):
                        if before_click:
                            before_click()
                        self.click(option, operation)
                        logger.info(f"{operation}: selected {label!r}")
                        return label
                if not abandoned:
                    logger.warning(f"{operation}: no option matched")
                    return None
            except (ElementNotInteractable, NoInteractableElementFound) as e:
                logger.info(f"{operation}: attempt {attempt} failed: {e}")
        logger.warning(f"{operation}: gave up after {self.max_attempts} attempts")
        return None

    def _finder(self, selector: str) -> Callable[[], List[Any]]:
        return lambda: self.driver.find_elements(selector)
