from dataclasses import dataclass
from typing import Optional

from .baseline import BaselineMatcher, apply_baseline_file
from .config import (
    AXE_DRIVER_NAME,
    AXE_FULL_NAME,
    AXE_INFORMATION_URI,
    AXE_SHORT_DESCRIPTION,
    CONVERTER_INFORMATION_URI,
    CONVERTER_NAME,
    CONVERTER_VERSION,
    SARIF_SCHEMA_URI,
    SARIF_VERSION,
    UNKNOWN,
    WCAG_TAXONOMY_GUID,
    WCAG_TAXONOMY_NAME,
    WCAG_TAXONOMY_URI,
)
from .environment import environment_data_from_results, environment_data_from_run_options
from .errors import UnsupportedInputShape
from .mapper import map_result
from .normalizer import RAW, detect_shape, normalize
from .rules import build_rule_catalog, rule_descriptors, wcag_taxa


@dataclass
class ConverterOptions:
    baseline_file: Optional[str] = None
    matcher: Optional[BaselineMatcher] = None


def _axe_driver(environment, descriptors, taxa):
    version = environment.axe_version
    driver = {
        "name": AXE_DRIVER_NAME,
        "fullName": AXE_FULL_NAME if version == UNKNOWN else f"{AXE_FULL_NAME} v{version}",
        "shortDescription": {"text": AXE_SHORT_DESCRIPTION},
        "version": version,
        "informationUri": AXE_INFORMATION_URI,
        "properties": {"microsoft/qualityDomain": "Accessibility"},
        "rules": descriptors,
    }
    if version != UNKNOWN:
        driver["downloadUri"] = f"https://www.npmjs.com/package/axe-core/v/{version}"
    if taxa:
        driver["supportedTaxonomies"] = [{"name": WCAG_TAXONOMY_NAME, "index": 0, "guid": WCAG_TAXONOMY_GUID}]
    return driver


def _conversion():
    return {
        "tool": {
            "driver": {
                "name": CONVERTER_NAME,
                "fullName": f"{CONVERTER_NAME} v{CONVERTER_VERSION}",
                "version": CONVERTER_VERSION,
                "semanticVersion": CONVERTER_VERSION,
                "informationUri": CONVERTER_INFORMATION_URI,
            }
        }
    }


def _invocation(environment):
    return {
        "startTimeUtc": environment.start_time_utc,
        "endTimeUtc": environment.end_time_utc,
        "executionSuccessful": True,
        "properties": {
            "toolVersion": environment.axe_version,
            "os": environment.os_name,
            "browser": environment.browser_name,
            "browserVersion": environment.browser_version,
            "userAgent": environment.user_agent,
        },
    }


def _artifact(environment):
    artifact = {
        "location": {"uri": environment.target_page_url},
        "sourceLanguage": "html",
        "roles": ["analysisTarget"],
    }
    if environment.target_page_title != UNKNOWN:
        artifact["description"] = {"text": environment.target_page_title}
    return artifact


def _taxonomy(taxa):
    return {
        "guid": WCAG_TAXONOMY_GUID,
        "name": WCAG_TAXONOMY_NAME,
        "fullName": "Web Content Accessibility Guidelines (WCAG) 2.1",
        "organization": "W3C",
        "informationUri": WCAG_TAXONOMY_URI,
        "isComprehensive": False,
        "taxa": [{"id": f"WCAG-{criterion}", "name": f"WCAG {criterion}"} for criterion in taxa],
    }


def build_run(findings, environment):
    catalog = build_rule_catalog(findings)
    taxa = wcag_taxa(catalog)
    page_url = environment.target_page_url
    results = [map_result(f, catalog.index_of(f.rule_id), page_url) for f in findings]
    run = {
        "tool": {"driver": _axe_driver(environment, rule_descriptors(catalog, taxa), taxa)},
        "conversion": _conversion(),
        "invocations": [_invocation(environment)],
        "artifacts": [_artifact(environment)],
        "results": results,
        "columnKind": "utf16CodeUnits",
    }
    if taxa:
        run["taxonomies"] = [_taxonomy(taxa)]
    return run


def build_log(findings, environment):
    return {
        "$schema": SARIF_SCHEMA_URI,
        "version": SARIF_VERSION,
        "runs": [build_run(findings, environment)],
    }


def convert_axe_to_sarif(axe_results, options=None):
    options = options or ConverterOptions()
    if not isinstance(axe_results, dict):
        raise UnsupportedInputShape(
            f"Expected an axe-core results object, got {type(axe_results).__name__}"
        )
    shape = detect_shape(axe_results)
    findings = normalize(axe_results, shape)
    log = build_log(findings, environment_data_from_results(axe_results))
    if options.baseline_file is not None:
        log = apply_baseline_file(log, options.baseline_file, matcher=options.matcher)
    return log


def convert_raw_to_sarif(raw_results, run_options=None, environment=None):
    shape = detect_shape(raw_results)
    if shape != RAW:
        raise UnsupportedInputShape(f"Expected raw axe rule results, got a {shape} result set")
    findings = normalize(raw_results, shape)
    environment = environment or environment_data_from_run_options(run_options)
    return build_log(findings, environment)


def sarif_reporter(raw_results, run_options, callback):
    """Reporter hook for axe.run: converts raw results and hands the log to callback once."""
    callback(convert_raw_to_sarif(raw_results, run_options))


def combine_logs(logs):
    logs = list(logs)
    if not logs:
        raise ValueError("At least one SARIF log is required to combine")
    combined = dict(logs[0])
    combined["runs"] = [run for log in logs for run in log.get("runs", [])]
    return combined
