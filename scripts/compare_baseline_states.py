import argparse
import json
from pathlib import Path

from axe_sarif_converter.baseline import BASELINE_STATES, count_baseline_states


def load_log(path):
    payload = json.loads(Path(path).read_text(encoding="utf-8-sig"))
    if isinstance(payload, dict) and isinstance(payload.get("runs"), list):
        return payload
    raise ValueError(f"Unsupported SARIF log format: {path}")


def main():
    parser = argparse.ArgumentParser(description="Show per-rule baselineState counts from a baselined SARIF log.")
    parser.add_argument("--log", required=True, help="Path to a SARIF log produced with --baseline-file")
    parser.add_argument("--top", type=int, default=30, help="Max rules to print")
    parser.add_argument("--changed-only", action="store_true", help="Skip rules whose results are all unchanged")
    args = parser.parse_args()

    by_rule = count_baseline_states(load_log(args.log))
    rows = []
    for rid, counts in by_rule.items():
        if args.changed_only and set(counts) <= {"unchanged"}:
            continue
        rows.append((rid, [int(counts.get(state, 0)) for state in BASELINE_STATES]))
    # most new findings first
    rows.sort(key=lambda row: (-row[1][0], -row[1][3], row[0]))

    print(f"rules_with_states={len(by_rule)}")
    print(f"rules_shown={len(rows)}")
    print("rule_id\t" + "\t".join(BASELINE_STATES))
    for rid, values in rows[: max(1, int(args.top))]:
        print(rid + "\t" + "\t".join(str(v) for v in values))


if __name__ == "__main__":
    main()
