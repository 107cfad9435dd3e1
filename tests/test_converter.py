import copy
import json
import unittest
from pathlib import Path

from axe_sarif_converter import (
    ConverterOptions,
    UnsupportedInputShape,
    combine_logs,
    convert_axe_to_sarif,
    convert_raw_to_sarif,
    sarif_reporter,
)
from axe_sarif_converter.environment import EnvironmentData
from axe_sarif_converter.mapper import FINGERPRINT_KEY

RESOURCES = Path(__file__).resolve().parent / "resources"

MINIMAL_V2_INPUT = {
    "toolOptions": {},
    "testEngine": {"version": "1.2.3"},
    "testRunner": {},
    "testEnvironment": {},
    "url": "https://example.com",
    "timestamp": "2018-03-23T21:36:58.321Z",
    "passes": [],
    "violations": [],
    "incomplete": [],
    "inapplicable": [],
}


def read_resource(name):
    return json.loads((RESOURCES / name).read_text(encoding="utf-8"))


class StubMatcher:
    def __init__(self, state="unchanged"):
        self.state = state
        self.calls = []

    def match_against_baseline(self, current_log, baseline_path):
        self.calls.append((current_log, baseline_path))
        annotated = copy.deepcopy(current_log)
        for run in annotated["runs"]:
            for result in run["results"]:
                result["baselineState"] = self.state
        return annotated


class ConvertAxeToSarifTests(unittest.TestCase):
    def test_minimal_input(self):
        log = convert_axe_to_sarif(MINIMAL_V2_INPUT)
        self.assertEqual(log["version"], "2.1.0")
        self.assertIn("$schema", log)
        (run,) = log["runs"]
        self.assertEqual(run["results"], [])
        self.assertEqual(run["tool"]["driver"]["name"], "axe-core")
        self.assertEqual(run["tool"]["driver"]["version"], "1.2.3")
        self.assertEqual(run["tool"]["driver"]["fullName"], "axe for Web v1.2.3")
        self.assertEqual(run["tool"]["driver"]["rules"], [])
        self.assertNotIn("taxonomies", run)
        self.assertEqual(run["conversion"]["tool"]["driver"]["name"], "axe-sarif-converter")
        self.assertEqual(run["artifacts"], [{"location": {"uri": "https://example.com"}, "sourceLanguage": "html", "roles": ["analysisTarget"]}])
        (invocation,) = run["invocations"]
        self.assertEqual(invocation["startTimeUtc"], "2018-03-23T21:36:58.321Z")
        self.assertEqual(invocation["endTimeUtc"], "2018-03-23T21:36:58.321Z")
        self.assertTrue(invocation["executionSuccessful"])
        self.assertEqual(invocation["properties"]["toolVersion"], "1.2.3")
        self.assertEqual(invocation["properties"]["browser"], "unknown")

    def test_reporter_v1_and_v2_produce_the_same_log(self):
        v1 = convert_axe_to_sarif(read_resource("basic-reporter-v1.json"))
        v2 = convert_axe_to_sarif(read_resource("basic-reporter-v2.json"))
        self.assertEqual(v1, v2)

    def test_results_reference_rule_catalog(self):
        (run,) = convert_axe_to_sarif(read_resource("basic-reporter-v2.json"))["runs"]
        rules = run["tool"]["driver"]["rules"]
        self.assertEqual([r["id"] for r in rules], ["color-contrast", "image-alt", "document-title", "video-caption"])
        for result in run["results"]:
            self.assertEqual(rules[result["ruleIndex"]]["id"], result["ruleId"])
        contrast = [r for r in run["results"] if r["ruleId"] == "color-contrast"]
        self.assertEqual(len(contrast), 3)
        self.assertEqual({r["ruleIndex"] for r in contrast}, {0})

    def test_levels_per_outcome(self):
        (run,) = convert_axe_to_sarif(read_resource("basic-reporter-v2.json"))["runs"]
        self.assertEqual(
            [(r["ruleId"], r["kind"], r["level"]) for r in run["results"]],
            [
                ("color-contrast", "fail", "error"),
                ("color-contrast", "fail", "error"),
                ("image-alt", "fail", "error"),
                ("document-title", "pass", "none"),
                ("color-contrast", "review", "warning"),
                ("video-caption", "notApplicable", "none"),
            ],
        )

    def test_nested_frame_result(self):
        (run,) = convert_axe_to_sarif(read_resource("basic-reporter-v2.json"))["runs"]
        nested = run["results"][1]
        self.assertEqual(
            [loc["fullyQualifiedName"] for loc in nested["locations"][0]["logicalLocations"]],
            ["#frame1", "#frame1;span#inner"],
        )

    def test_wcag_taxonomy(self):
        (run,) = convert_axe_to_sarif(read_resource("basic-reporter-v2.json"))["runs"]
        (taxonomy,) = run["taxonomies"]
        self.assertEqual([t["id"] for t in taxonomy["taxa"]], ["WCAG-1.4.3", "WCAG-1.1.1", "WCAG-2.4.2", "WCAG-1.2.2"])
        self.assertEqual(run["tool"]["driver"]["supportedTaxonomies"][0]["guid"], taxonomy["guid"])

    def test_environment_from_results(self):
        (run,) = convert_axe_to_sarif(read_resource("basic-reporter-v2.json"))["runs"]
        props = run["invocations"][0]["properties"]
        self.assertEqual((props["os"], props["browser"], props["browserVersion"]), ("Windows", "Chrome", "120.0.6099.71"))

    def test_conversion_is_deterministic(self):
        first = json.dumps(convert_axe_to_sarif(read_resource("basic-reporter-v2.json")))
        second = json.dumps(convert_axe_to_sarif(read_resource("basic-reporter-v2.json")))
        self.assertEqual(first, second)

    def test_one_finding_per_outcome_for_each_shape(self):
        rule = {"id": "region", "help": "All page content should be contained by landmarks"}
        node = {"target": ["div.orphan"], "any": [], "all": [], "none": []}
        expected = {"violations": "error", "incomplete": "warning", "passes": "none", "inapplicable": "none"}
        for reporter in ("v1", "v2"):
            for key, level in expected.items():
                with self.subTest(reporter=reporter, outcome=key):
                    payload = dict(MINIMAL_V2_INPUT, toolOptions={"reporter": reporter})
                    payload[key] = [dict(rule, nodes=[] if key == "inapplicable" else [node])]
                    (run,) = convert_axe_to_sarif(payload)["runs"]
                    self.assertEqual([r["level"] for r in run["results"]], [level])

    def test_baseline_applied_when_requested(self):
        matcher = StubMatcher("unchanged")
        log = convert_axe_to_sarif(
            read_resource("basic-reporter-v2.json"),
            ConverterOptions(baseline_file="previous.sarif", matcher=matcher),
        )
        self.assertEqual(len(matcher.calls), 1)
        current, baseline_path = matcher.calls[0]
        self.assertEqual(baseline_path, "previous.sarif")
        self.assertNotIn("baselineState", current["runs"][0]["results"][0])
        self.assertEqual({r["baselineState"] for r in log["runs"][0]["results"]}, {"unchanged"})

    def test_no_baseline_state_without_baseline(self):
        log = convert_axe_to_sarif(read_resource("basic-reporter-v2.json"))
        for result in log["runs"][0]["results"]:
            self.assertNotIn("baselineState", result)

    def test_unsupported_input(self):
        for payload in ({}, [], read_resource("raw-results.json"), "axe"):
            with self.subTest(payload=type(payload).__name__):
                with self.assertRaises(UnsupportedInputShape):
                    convert_axe_to_sarif(payload)


class RawReporterTests(unittest.TestCase):
    ENVIRONMENT = EnvironmentData(
        start_time_utc="2024-01-15T10:00:00.000Z",
        end_time_utc="2024-01-15T10:00:01.000Z",
        target_page_url="https://example.com/raw",
        axe_version="4.8.2",
    )

    def test_callback_invoked_once_with_single_run(self):
        received = []
        returned = sarif_reporter(read_resource("raw-results.json"), {"url": "https://example.com/raw"}, received.append)
        self.assertIsNone(returned)
        self.assertEqual(len(received), 1)
        (run,) = received[0]["runs"]
        self.assertEqual([r["level"] for r in run["results"]], ["error", "none", "warning", "none"])
        self.assertEqual(run["artifacts"][0]["location"]["uri"], "https://example.com/raw")
        self.assertTrue(run["invocations"][0]["startTimeUtc"].endswith("Z"))

    def test_empty_raw_input(self):
        received = []
        sarif_reporter([], {}, received.append)
        (run,) = received[0]["runs"]
        self.assertEqual(run["results"], [])
        self.assertEqual(run["tool"]["driver"]["rules"], [])

    def test_raw_matches_grouped_fingerprints(self):
        raw_log = convert_raw_to_sarif(read_resource("raw-results.json"), environment=self.ENVIRONMENT)
        grouped_log = convert_axe_to_sarif(read_resource("basic-reporter-v2.json"))
        raw_first = raw_log["runs"][0]["results"][0]["partialFingerprints"][FINGERPRINT_KEY]
        grouped_first = grouped_log["runs"][0]["results"][0]["partialFingerprints"][FINGERPRINT_KEY]
        self.assertEqual(raw_first, grouped_first)

    def test_explicit_environment(self):
        (run,) = convert_raw_to_sarif(read_resource("raw-results.json"), environment=self.ENVIRONMENT)["runs"]
        self.assertEqual(run["invocations"][0]["endTimeUtc"], "2024-01-15T10:00:01.000Z")
        self.assertEqual(run["tool"]["driver"]["version"], "4.8.2")

    def test_grouped_input_rejected(self):
        with self.assertRaises(UnsupportedInputShape):
            convert_raw_to_sarif(MINIMAL_V2_INPUT)


class CombineLogsTests(unittest.TestCase):
    def test_runs_concatenated_in_order(self):
        first = convert_axe_to_sarif(read_resource("basic-reporter-v2.json"))
        second = convert_axe_to_sarif(MINIMAL_V2_INPUT)
        third = combine_logs([first, second])
        combined = combine_logs([third, first])
        self.assertEqual(len(combined["runs"]), 3)
        self.assertEqual(combined["runs"], [first["runs"][0], second["runs"][0], first["runs"][0]])
        self.assertEqual(combined["$schema"], first["$schema"])
        self.assertEqual(combined["version"], "2.1.0")

    def test_inputs_not_modified(self):
        first = convert_axe_to_sarif(MINIMAL_V2_INPUT)
        combine_logs([first, convert_axe_to_sarif(MINIMAL_V2_INPUT)])
        self.assertEqual(len(first["runs"]), 1)

    def test_empty_input_rejected(self):
        with self.assertRaises(ValueError):
            combine_logs([])


if __name__ == "__main__":
    unittest.main()
