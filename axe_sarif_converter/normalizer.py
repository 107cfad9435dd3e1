from .errors import UnsupportedInputShape
from .findings import (
    INAPPLICABLE,
    INCOMPLETE,
    OUTCOME_KEYS,
    PASS,
    VIOLATION,
    CanonicalFinding,
    as_target,
)


REPORTER_V1 = "reporter-v1"
REPORTER_V2 = "reporter-v2"
RAW = "raw"

RAW_RESULT_OUTCOMES = {
    "failed": VIOLATION,
    "passed": PASS,
    "cantTell": INCOMPLETE,
    "inapplicable": INAPPLICABLE,
}


def _has_failure_summary(axe_results):
    for key, rules in axe_results.items():
        if key not in OUTCOME_KEYS or not isinstance(rules, list):
            continue
        for rule in rules:
            if not isinstance(rule, dict):
                continue
            for node in rule.get("nodes") or []:
                if isinstance(node, dict) and "failureSummary" in node:
                    return True
    return False


def _is_raw_rule(item):
    if not isinstance(item, dict) or not isinstance(item.get("id"), str):
        return False
    return "result" in item or any(k in item for k in OUTCOME_KEYS)


def detect_shape(raw):
    if isinstance(raw, dict) and any(k in raw for k in OUTCOME_KEYS):
        tool_options = raw.get("toolOptions")
        reporter = tool_options.get("reporter") if isinstance(tool_options, dict) else None
        if reporter == "v1":
            return REPORTER_V1
        if reporter == "v2":
            return REPORTER_V2
        return REPORTER_V1 if _has_failure_summary(raw) else REPORTER_V2
    if isinstance(raw, list) and all(_is_raw_rule(item) for item in raw):
        return RAW
    kind = type(raw).__name__
    raise UnsupportedInputShape(
        f"Input of type {kind} is not an axe-core result set (reporter v1/v2 object or raw rule list)"
    )


def _as_list(value, what):
    if value is None:
        return []
    if not isinstance(value, list):
        raise UnsupportedInputShape(f"Expected {what} to be a list, got {type(value).__name__}")
    return value


def _rule_metadata(rule):
    return {
        "rule_id": str(rule.get("id") or ""),
        "rule_description": rule.get("description") or "",
        "rule_help": rule.get("help") or "",
        "help_uri": rule.get("helpUrl") or "",
        "tags": tuple(str(t) for t in rule.get("tags") or []),
    }


def _check_messages(checks):
    messages = []
    for check in checks or []:
        if isinstance(check, dict) and check.get("message"):
            messages.append(str(check["message"]))
    return messages


def _section(heading, messages):
    return "\n".join([heading] + [f"  {m}" for m in messages])


def _node_message(node, outcome, fallback):
    any_messages = _check_messages(node.get("any"))
    all_messages = _check_messages(node.get("all")) + _check_messages(node.get("none"))
    if outcome == PASS:
        passed = any_messages + all_messages
        return _section("The following checks passed:", passed) if passed else fallback
    sections = []
    if any_messages:
        sections.append(_section("Fix any of the following:", any_messages))
    if all_messages:
        sections.append(_section("Fix all of the following:", all_messages))
    return "\n\n".join(sections) if sections else fallback


def _rule_level_finding(rule, outcome):
    meta = _rule_metadata(rule)
    message = meta["rule_help"] or meta["rule_description"] or meta["rule_id"]
    return CanonicalFinding(outcome=outcome, message=message, impact=rule.get("impact"), **meta)


def _grouped_findings(axe_results, use_failure_summary):
    for key, rules in axe_results.items():
        outcome = OUTCOME_KEYS.get(key)
        if outcome is None:
            continue
        for rule in _as_list(rules, key):
            if not isinstance(rule, dict):
                raise UnsupportedInputShape(f"Entries of {key} must be rule objects, got {type(rule).__name__}")
            nodes = _as_list(rule.get("nodes"), f"nodes of rule {rule.get('id')!r}")
            if not nodes:
                yield _rule_level_finding(rule, outcome)
                continue
            meta = _rule_metadata(rule)
            fallback = meta["rule_help"] or meta["rule_id"]
            for node in nodes:
                if not isinstance(node, dict):
                    raise UnsupportedInputShape(f"Nodes of rule {meta['rule_id']!r} must be objects")
                summary = node.get("failureSummary") if use_failure_summary else None
                yield CanonicalFinding(
                    outcome=outcome,
                    target=as_target(node.get("target")),
                    snippet=node.get("html"),
                    message=summary or _node_message(node, outcome, fallback),
                    impact=node.get("impact") or rule.get("impact"),
                    **meta,
                )


def _raw_findings(raw_results):
    for rule in raw_results:
        meta = _rule_metadata(rule)
        fallback = meta["rule_help"] or meta["rule_id"]
        produced = False
        for key, nodes in rule.items():
            outcome = OUTCOME_KEYS.get(key)
            if outcome is None:
                continue
            for node in _as_list(nodes, f"{key} of rule {meta['rule_id']!r}"):
                if not isinstance(node, dict):
                    raise UnsupportedInputShape(f"Nodes of rule {meta['rule_id']!r} must be objects")
                element = node.get("node") if isinstance(node.get("node"), dict) else {}
                selector = element.get("selector", node.get("target"))
                produced = True
                yield CanonicalFinding(
                    outcome=outcome,
                    target=as_target(selector),
                    snippet=element.get("source", node.get("html")),
                    message=_node_message(node, outcome, fallback),
                    impact=node.get("impact") or rule.get("impact"),
                    **meta,
                )
        if not produced:
            outcome = RAW_RESULT_OUTCOMES.get(rule.get("result"))
            if outcome is None:
                raise UnsupportedInputShape(
                    f"Raw rule {meta['rule_id']!r} has no nodes and an unknown result {rule.get('result')!r}"
                )
            yield _rule_level_finding(rule, outcome)


def _parse_reporter_v1(raw):
    return _grouped_findings(raw, use_failure_summary=True)


def _parse_reporter_v2(raw):
    return _grouped_findings(raw, use_failure_summary=False)


SHAPE_PARSERS = {
    REPORTER_V1: _parse_reporter_v1,
    REPORTER_V2: _parse_reporter_v2,
    RAW: _raw_findings,
}


def normalize(raw, shape=None):
    shape = shape or detect_shape(raw)
    parser = SHAPE_PARSERS.get(shape)
    if parser is None:
        raise UnsupportedInputShape(f"No parser registered for input shape {shape!r}")
    return list(parser(raw))
