import hashlib
import json

from .findings import (
    FRAME_SEPARATOR,
    INAPPLICABLE,
    INCOMPLETE,
    PASS,
    VIOLATION,
    frame_level_name,
    normalize_target,
)


# Downstream gating filters on these; do not change without a major version.
LEVELS = {
    VIOLATION: "error",
    INCOMPLETE: "warning",
    PASS: "none",
    INAPPLICABLE: "none",
}

KINDS = {
    VIOLATION: "fail",
    INCOMPLETE: "review",
    PASS: "pass",
    INAPPLICABLE: "notApplicable",
}

FINGERPRINT_KEY = "axeRuleTarget/v1"


def fingerprint(rule_id, target):
    normalized = normalize_target(target)
    chain = [list(level) for level in normalized] if normalized is not None else None
    payload = rule_id + "\n" + json.dumps(chain, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def logical_locations(target):
    locations = []
    names = []
    for level in target:
        name = frame_level_name(level)
        names.append(name)
        locations.append(
            {
                "name": name,
                "fullyQualifiedName": FRAME_SEPARATOR.join(names),
                "kind": "element",
            }
        )
    return locations


def message_markdown(text):
    lines = []
    for line in text.splitlines():
        if line.startswith("  "):
            lines.append(f"- {line.strip()}")
        elif line.endswith(":"):
            lines.append(f"**{line}**")
        else:
            lines.append(line)
    return "\n".join(lines)


def _location(finding, page_url):
    physical = {"artifactLocation": {"uri": page_url, "index": 0}}
    if finding.snippet:
        physical["region"] = {"snippet": {"text": finding.snippet}}
    location = {"physicalLocation": physical}
    if finding.target:
        location["logicalLocations"] = logical_locations(finding.target)
    return location


def map_result(finding, rule_index, page_url):
    result = {
        "ruleId": finding.rule_id,
        "ruleIndex": rule_index,
        "kind": KINDS[finding.outcome],
        "level": LEVELS[finding.outcome],
        "message": {
            "text": finding.message,
            "markdown": message_markdown(finding.message),
        },
        "locations": [_location(finding, page_url)],
        "partialFingerprints": {FINGERPRINT_KEY: fingerprint(finding.rule_id, finding.target)},
    }
    if finding.impact:
        result["properties"] = {"impact": finding.impact}
    return result
