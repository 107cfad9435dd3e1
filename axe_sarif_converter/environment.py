import re
from dataclasses import dataclass
from datetime import datetime, timezone

from .config import UNKNOWN


BROWSER_PATTERNS = [
    ("Microsoft Edge", re.compile(r"Edg(?:e|A|iOS)?/([\d.]+)")),
    ("Opera", re.compile(r"OPR/([\d.]+)")),
    ("Headless Chrome", re.compile(r"HeadlessChrome/([\d.]+)")),
    ("Chrome", re.compile(r"(?:Chrome|CriOS)/([\d.]+)")),
    ("Firefox", re.compile(r"(?:Firefox|FxiOS)/([\d.]+)")),
    ("Safari", re.compile(r"Version/([\d.]+).*Safari/")),
]

OS_PATTERNS = [
    ("Windows", re.compile(r"Windows NT")),
    ("Android", re.compile(r"Android")),
    ("iOS", re.compile(r"iPhone|iPad|iPod")),
    ("Chrome OS", re.compile(r"CrOS")),
    ("macOS", re.compile(r"Mac OS X|Macintosh")),
    ("Linux", re.compile(r"Linux|X11")),
]


@dataclass(frozen=True)
class EnvironmentData:
    start_time_utc: str
    end_time_utc: str
    target_page_url: str = UNKNOWN
    target_page_title: str = UNKNOWN
    axe_version: str = UNKNOWN
    os_name: str = UNKNOWN
    browser_name: str = UNKNOWN
    browser_version: str = UNKNOWN
    user_agent: str = UNKNOWN


def format_timestamp(moment):
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def utc_now():
    return format_timestamp(datetime.now(timezone.utc))


def parse_user_agent(user_agent):
    os_name = UNKNOWN
    browser_name = UNKNOWN
    browser_version = UNKNOWN
    if not user_agent:
        return os_name, browser_name, browser_version
    for name, pattern in OS_PATTERNS:
        if pattern.search(user_agent):
            os_name = name
            break
    for name, pattern in BROWSER_PATTERNS:
        m = pattern.search(user_agent)
        if m:
            browser_name, browser_version = name, m.group(1)
            break
    return os_name, browser_name, browser_version


def _text(value):
    if value is None:
        return UNKNOWN
    value = str(value).strip()
    return value or UNKNOWN


def _build(start, end, url, title, axe_version, user_agent):
    os_name, browser_name, browser_version = parse_user_agent(user_agent)
    return EnvironmentData(
        start_time_utc=start,
        end_time_utc=end,
        target_page_url=_text(url),
        target_page_title=_text(title),
        axe_version=_text(axe_version),
        os_name=os_name,
        browser_name=browser_name,
        browser_version=browser_version,
        user_agent=_text(user_agent),
    )


def _section(container, key):
    value = container.get(key)
    return value if isinstance(value, dict) else {}


def environment_data_from_results(axe_results, now=None):
    """Environment of a grouped axe result set; the scan timestamp covers start and end."""
    now = now or utc_now()
    timestamp = axe_results.get("timestamp") or now
    return _build(
        timestamp,
        timestamp,
        axe_results.get("url"),
        axe_results.get("title"),
        _section(axe_results, "testEngine").get("version"),
        _section(axe_results, "testEnvironment").get("userAgent"),
    )


def environment_data_from_run_options(run_options, now=None):
    run_options = run_options if isinstance(run_options, dict) else {}
    now = now or utc_now()
    start = run_options.get("startTime") or now
    end = run_options.get("endTime") or start
    return _build(
        start,
        end,
        run_options.get("url"),
        run_options.get("title"),
        run_options.get("axeVersion"),
        run_options.get("userAgent"),
    )
