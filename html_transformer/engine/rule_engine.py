"""
RuleEngine - Applies TransformationRules to a BeautifulSoup tree.

For every rule, each selector is resolved against the current tree and the
matches are concatenated in selector order (a node matched by two selectors
of the same rule is mutated twice). Every mutate(node, soup) call is its own
asyncio task. Rules are visited in collection order and each rule's tasks
run up to their first suspension before the next rule resolves; all tasks
are then awaited with a single gather, and the tree is serialized once,
after every task has settled.

Failure policy (isolate and continue):
- A mutate call that raises is recorded as a MutationFailure for that node
  only; sibling mutations and serialization still run.
- A rejected selector is recorded as a SelectorResolutionFailure for that
  rule only; none of its mutations run, other rules are unaffected.

Usage:
    transformer = Transformer([
        TransformationRule(selectors=["h1"], mutate=set_text("Title")),
    ])
    html = await transformer.transform("<h1>Old</h1>")
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Sequence as SequenceABC
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from uuid import uuid4

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from ..adapters.document_adapter import DocumentAdapter
from ..contracts.errors import MutationFailure, SelectorResolutionFailure
from ..contracts.inputs import RawInput, coerce_input
from ..contracts.results import RuleOutcome, TransformResult
from ..contracts.rules import TransformationRule
from ..monitoring.logger import TransformLogger


logger = logging.getLogger(__name__)


# =============================================================================
# APPLY PHASE
# =============================================================================


def resolve_selectors(
    soup: BeautifulSoup, selectors: Sequence[str]
) -> List[Tuple[str, Tag]]:
    """
    Resolve selectors to (selector, node) matches, in selector order.

    Duplicates are kept: a node matched by several selectors appears once
    per selector.

    Raises:
        SelectorResolutionFailure: A selector was rejected by soupsieve
    """
    matches: List[Tuple[str, Tag]] = []
    for selector in selectors:
        try:
            nodes = soup.select(selector)
        except (SelectorSyntaxError, NotImplementedError) as e:
            raise SelectorResolutionFailure(selector, e) from e
        matches.extend((selector, node) for node in nodes)
    return matches


async def _invoke(rule: TransformationRule, node: Tag, soup: BeautifulSoup) -> None:
    result = rule.mutate(node, soup)
    if inspect.isawaitable(result):
        await result


def _schedule_rule(soup: BeautifulSoup, outcome: RuleOutcome) -> List[Tuple[str, Tag, "asyncio.Future"]]:
    rule = outcome.rule

    try:
        matches = resolve_selectors(soup, rule.selectors)
    except SelectorResolutionFailure as e:
        outcome.selector_error = e
        logger.error(f"Rule {rule.label} skipped: {e}")
        return []

    outcome.matched = len(matches)
    if not matches:
        logger.debug(f"No elements found for rule {rule.label}: {list(rule.selectors)}")

    return [
        (selector, node, asyncio.ensure_future(_invoke(rule, node, soup)))
        for selector, node in matches
    ]


async def apply_rules(
    soup: BeautifulSoup, rules: Iterable[TransformationRule]
) -> List[RuleOutcome]:
    """
    Apply rules to a tree in place, without serializing.

    Rules are visited in collection order. Each rule's selectors are resolved,
    its mutations are started, and they run up to their first suspension
    before the next rule resolves. A rule can therefore match what an earlier
    non-suspending rule just changed. All mutations of all rules are then
    awaited together; the call returns once every one has settled.

    Args:
        soup: Tree to mutate
        rules: Rules in collection order

    Returns:
        One RuleOutcome per rule, in the order given
    """
    outcomes: List[RuleOutcome] = []
    scheduled: List[Tuple[RuleOutcome, str, Tag, "asyncio.Future"]] = []

    for rule in rules:
        outcome = RuleOutcome(rule=rule)
        outcomes.append(outcome)
        tasks = _schedule_rule(soup, outcome)
        scheduled.extend((outcome, selector, node, task) for selector, node, task in tasks)
        if tasks:
            await asyncio.sleep(0)

    results = await asyncio.gather(
        *(task for _, _, _, task in scheduled),
        return_exceptions=True,
    )

    interrupted: Optional[BaseException] = None
    for (outcome, selector, node, _), result in zip(scheduled, results):
        if isinstance(result, Exception):
            failure = MutationFailure(selector, node, result, rule_name=outcome.rule.label)
            outcome.failures.append(failure)
            logger.warning(str(failure))
        elif isinstance(result, BaseException):
            interrupted = interrupted or result
        else:
            outcome.applied += 1

    # Everything has settled; surface anything the per-node isolation does
    # not cover, such as cancellation.
    if interrupted is not None:
        raise interrupted

    for outcome in outcomes:
        logger.debug(
            f"Rule {outcome.rule.label} applied {outcome.applied}/{outcome.matched} mutation(s)"
        )

    return outcomes


# =============================================================================
# RULE COLLECTION
# =============================================================================


class RuleCollection(SequenceABC):
    """
    Live read-only view over a Transformer's rules.

    Reflects every later add_rule/remove_rule/clear_rules call.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: List[TransformationRule]):
        self._rules = rules

    def __getitem__(self, index):
        return self._rules[index]

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RuleCollection):
            return self._rules == other._rules
        if isinstance(other, (list, tuple)):
            return self._rules == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RuleCollection({self._rules!r})"


# =============================================================================
# TRANSFORMER
# =============================================================================


class Transformer:
    """
    Holds an ordered rule collection and applies it to HTML documents.

    The only state kept between transform() calls is the rule collection;
    each call works on a freshly parsed tree or on the tree the caller
    passes in.
    """

    def __init__(
        self,
        rules: Optional[Iterable[TransformationRule]] = None,
        adapter: Optional[DocumentAdapter] = None,
    ):
        """
        Initialize the transformer.

        Args:
            rules: Initial rules, in application order
            adapter: DocumentAdapter to parse and serialize with
        """
        self._rules: List[TransformationRule] = []
        self._view = RuleCollection(self._rules)
        self._adapter = adapter or DocumentAdapter()
        self._tlog = TransformLogger()

        if rules:
            self.add_rule(list(rules))

    # =========================================================================
    # RULE MANAGEMENT
    # =========================================================================

    @property
    def rules(self) -> RuleCollection:
        """Live read-only view of the rule collection."""
        return self._view

    @property
    def adapter(self) -> DocumentAdapter:
        return self._adapter

    def add_rule(
        self, rule: Union[TransformationRule, Iterable[TransformationRule]]
    ) -> None:
        """
        Append one rule or a sequence of rules to the end of the collection.

        Raises:
            TypeError: If anything other than a TransformationRule is given
        """
        new_rules = [rule] if isinstance(rule, TransformationRule) else list(rule)
        for item in new_rules:
            if not isinstance(item, TransformationRule):
                raise TypeError(
                    f"Expected TransformationRule, got {type(item).__name__}"
                )

        self._rules.extend(new_rules)
        logger.debug(f"Added {len(new_rules)} rule(s); {len(self._rules)} total")

    def remove_rule(self, selector: str) -> int:
        """
        Remove every rule whose selectors contain selector exactly.

        Args:
            selector: Selector string to match verbatim (no pattern matching)

        Returns:
            Number of rules removed (0 if none matched)
        """
        kept = [r for r in self._rules if not r.targets(selector)]
        removed = len(self._rules) - len(kept)
        self._rules[:] = kept
        if removed:
            logger.debug(f"Removed {removed} rule(s) targeting '{selector}'")
        return removed

    def clear_rules(self) -> None:
        """Remove all rules."""
        self._rules.clear()

    # =========================================================================
    # TRANSFORM
    # =========================================================================

    async def transform(
        self,
        source: RawInput,
        parse_options: Optional[Mapping[str, Any]] = None,
        is_document: Optional[bool] = None,
    ) -> str:
        """
        Apply every rule to the document and return it serialized.

        Args:
            source: BeautifulSoup, str, bytes, a byte stream, or a
                    DocumentSource variant
            parse_options: Forwarded verbatim to BeautifulSoup
            is_document: Full-document (True) or fragment (False) parsing;
                         None leaves the parser default in place

        Returns:
            Serialized HTML, including mutations that succeeded

        Raises:
            ParseFailure: Input could not be decoded or parsed
            StreamReadFailure: A streamed input failed mid-read
        """
        result = await self.transform_with_report(source, parse_options, is_document)
        return result.html

    async def transform_with_report(
        self,
        source: RawInput,
        parse_options: Optional[Mapping[str, Any]] = None,
        is_document: Optional[bool] = None,
    ) -> TransformResult:
        """
        Same as transform(), but also returns per-rule outcomes and timing.
        """
        run_id = uuid4().hex[:12]
        start_time = time.time()
        document = coerce_input(source)
        # Rules added or removed while this call is in flight do not affect it
        rules = list(self._rules)

        self._tlog.log_start(run_id, type(document).__name__, len(rules))

        soup = await self._adapter.load(document, parse_options, is_document)
        outcomes = await apply_rules(soup, rules)
        html = self._adapter.serialize(soup)

        result = TransformResult(
            html=html,
            outcomes=outcomes,
            duration_ms=(time.time() - start_time) * 1000,
        )

        for outcome in outcomes:
            if outcome.selector_error is not None:
                self._tlog.log_rule_failure(run_id, outcome.rule.label, outcome.selector_error)
            for failure in outcome.failures:
                self._tlog.log_rule_failure(run_id, outcome.rule.label, failure)
        self._tlog.log_complete(run_id, result)

        return result

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"Transformer({len(self._rules)} rules)"
