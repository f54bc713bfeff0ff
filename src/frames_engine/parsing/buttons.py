"""
Button Parser
=============

Extracts and validates the indexed buttons of a flat meta tag dialect.

Tag Shape:
    {prefix}:{index}            -> label
    {prefix}:{index}:action     -> post | post_redirect | link | mint | tx
    {prefix}:{index}:target     -> action target
    {prefix}:{index}:post_url   -> result submission URL

    where prefix is "fc:frame:button" or "of:button" and index is 1..4.

Algorithm:
    1. Collect every tag starting with the prefix; report tags that do not
       match the shape as "Unrecognized meta tag"
    2. Keep only the first occurrence of a key, report the rest as
       "Duplicate meta tag"
    3. Resolve each index into a button, validating per action kind.
       A slot with any error contributes no button
    4. Report the first gap in the populated indexes as
       "Button sequence is not continuous"; the gap does not remove buttons
    5. Return populated slots in index order
"""

import logging
import re
from typing import Dict, List, Optional

from frames_engine.models.frame import ButtonAction, FrameButton
from frames_engine.parsing.document import FrameDocument
from frames_engine.parsing.reporter import Reporter
from frames_engine.parsing.validators import (
    MAX_BUTTONS,
    ValidationError,
    validate_caip10,
    validate_url,
)


logger = logging.getLogger(__name__)


def _button_key_pattern(prefix: str) -> "re.Pattern[str]":
    return re.compile(
        rf"^{re.escape(prefix)}:([1-{MAX_BUTTONS}])(?::(action|target|post_url))?$"
    )


def parse_buttons(
    document: FrameDocument,
    reporter: Reporter,
    prefix: str,
) -> List[FrameButton]:
    """
    Parse buttons declared under prefix.

    Args:
        document: Loaded HTML document
        reporter: Reporter of the calling dialect
        prefix: "fc:frame:button" or "of:button"

    Returns:
        Valid buttons in index order (gaps compacted)
    """
    pattern = _button_key_pattern(prefix)
    seen_keys = set()
    raw_slots: Dict[int, Dict[str, Optional[str]]] = {}

    for key, content in document.find_meta_tags(prefix):
        match = pattern.match(key)

        if match is None:
            reporter.error(key, "Unrecognized meta tag")
            continue

        if key in seen_keys:
            reporter.error(key, "Duplicate meta tag")
            continue

        seen_keys.add(key)
        index = int(match.group(1))
        field = match.group(2) or "label"
        raw_slots.setdefault(index, {})[field] = content

    slots: List[Optional[FrameButton]] = [None] * MAX_BUTTONS

    for index in sorted(raw_slots):
        slots[index - 1] = _resolve_button(reporter, prefix, index, raw_slots[index])

    previous_index = 0
    for position, button in enumerate(slots, start=1):
        if button is None:
            continue
        if position - previous_index != 1:
            reporter.error(f"{prefix}:{position}", "Button sequence is not continuous")
            break
        previous_index = position

    buttons = [button for button in slots if button is not None]
    logger.debug(f"Parsed {len(buttons)} buttons for {prefix}")
    return buttons


def _resolve_button(
    reporter: Reporter,
    prefix: str,
    index: int,
    raw: Dict[str, Optional[str]],
) -> Optional[FrameButton]:
    """Validate one slot; returns None when the slot has any error."""
    key = f"{prefix}:{index}"
    label = raw.get("label")

    if not label:
        reporter.error(key, "Missing button label")
        return None

    action = raw.get("action") or ButtonAction.POST.value
    target = raw.get("target") or None
    post_url = raw.get("post_url") or None

    try:
        action_kind = ButtonAction(action)
    except ValueError:
        reporter.error(f"{key}:action", "Invalid button action")
        return None

    if action_kind in (ButtonAction.LINK, ButtonAction.MINT, ButtonAction.TX):
        if target is None:
            reporter.error(f"{key}:target", "Missing button target url")
            return None

    if action_kind == ButtonAction.MINT:
        try:
            validate_caip10(target)
        except ValidationError:
            reporter.error(f"{key}:target", "Invalid CAIP-10 URL")
            return None
        return FrameButton(action=action_kind, label=label, target=target)

    if target is not None and not _is_valid(reporter, f"{key}:target", target):
        return None

    if action_kind == ButtonAction.LINK:
        return FrameButton(action=action_kind, label=label, target=target)

    # tx, post and post_redirect may carry a post_url
    if post_url is not None and not _is_valid(reporter, f"{key}:post_url", post_url):
        return None

    return FrameButton(
        action=action_kind,
        label=label,
        target=target,
        post_url=post_url,
    )


def _is_valid(reporter: Reporter, key: str, url: str) -> bool:
    try:
        validate_url(url)
    except ValidationError as e:
        reporter.error(key, e)
        return False
    return True
