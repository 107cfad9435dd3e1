import json
import subprocess
import tempfile
from collections import Counter
from pathlib import Path
from typing import Protocol

import requests

from . import config
from .errors import BaselineResultParseError, BaselineToolExecutionError, BaselineToolLaunchError


TMP_DIR_PREFIX = "axe-sarif-converter-baseline"
ORIGINAL_RESULTS_FILE = "original-results.sarif"
ANNOTATED_RESULTS_FILE = "annotated-results.sarif"
DOWNLOADED_BASELINE_FILE = "baseline-results.sarif"

BASELINE_STATES = ("new", "unchanged", "updated", "absent")


class BaselineMatcher(Protocol):
    def match_against_baseline(self, current_log, baseline_path):
        ...


def is_remote(baseline_path):
    return str(baseline_path).lower().startswith(("http://", "https://"))


def _download_baseline(url, tmp_dir):
    target = Path(tmp_dir) / DOWNLOADED_BASELINE_FILE
    try:
        resp = requests.get(url, timeout=(10, config.download_timeout()))
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise BaselineToolLaunchError(f"Could not download baseline file {url}: {exc}") from exc
    target.write_bytes(resp.content)
    return target


class MultitoolBaselineMatcher:
    """Runs `sarif match-results-forward` to annotate results with baselineState.

    There is no timeout: a hung multitool hangs the conversion.
    """

    def __init__(self, command=None):
        self.command = list(command) if command else None

    def _command(self):
        return self.command or config.multitool_command()

    def match_against_baseline(self, current_log, baseline_path):
        with tempfile.TemporaryDirectory(prefix=TMP_DIR_PREFIX) as tmp_dir:
            original = Path(tmp_dir) / ORIGINAL_RESULTS_FILE
            annotated = Path(tmp_dir) / ANNOTATED_RESULTS_FILE
            original.write_text(json.dumps(current_log, ensure_ascii=False), encoding="utf-8")

            previous = _download_baseline(baseline_path, tmp_dir) if is_remote(baseline_path) else baseline_path
            cmd = self._command() + [
                "match-results-forward",
                "--previous",
                str(previous),
                "--output-file-path",
                str(annotated),
                str(original),
            ]
            try:
                result = subprocess.run(cmd, capture_output=True, text=True, encoding="utf-8", errors="ignore")
            except OSError as exc:
                raise BaselineToolLaunchError(
                    f"Error occurred while executing SARIF Multitool to perform baselining: {exc}"
                ) from exc
            if result.returncode != 0:
                raise BaselineToolExecutionError(result.returncode, result.stdout)

            try:
                return json.loads(annotated.read_text(encoding="utf-8-sig"))
            except (OSError, ValueError) as exc:
                raise BaselineResultParseError(
                    f"Could not parse SARIF Multitool output {annotated.name}: {exc}"
                ) from exc


def apply_baseline_file(log, baseline_path, matcher=None):
    matcher = matcher or MultitoolBaselineMatcher()
    return matcher.match_against_baseline(log, baseline_path)


def count_baseline_states(log):
    by_rule = {}
    for run in log.get("runs", []):
        for result in run.get("results") or []:
            state = result.get("baselineState")
            if not state:
                continue
            rid = str(result.get("ruleId", "unknown"))
            by_rule.setdefault(rid, Counter())[state] += 1
    return by_rule


def total_baseline_states(log):
    totals = Counter()
    for counts in count_baseline_states(log).values():
        totals.update(counts)
    return totals
