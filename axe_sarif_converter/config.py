import os
import shlex

import dotenv


CONVERTER_NAME = "axe-sarif-converter"
CONVERTER_VERSION = "1.0.0"
CONVERTER_INFORMATION_URI = "https://github.com/microsoft/axe-sarif-converter"

SARIF_VERSION = "2.1.0"
SARIF_SCHEMA_URI = "https://schemastore.azurewebsites.net/schemas/json/sarif-2.1.0-rtm.5.json"

AXE_DRIVER_NAME = "axe-core"
AXE_FULL_NAME = "axe for Web"
AXE_SHORT_DESCRIPTION = "An open source accessibility rules library for automated testing."
AXE_INFORMATION_URI = "https://www.deque.com/axe/axe-for-web/"

WCAG_TAXONOMY_NAME = "WCAG"
WCAG_TAXONOMY_GUID = "ca34e0e1-5faf-4f55-a989-cdae42a98f18"
WCAG_TAXONOMY_URI = "https://www.w3.org/TR/WCAG21"

UNKNOWN = "unknown"

MULTITOOL_ENV = "AXE_SARIF_MULTITOOL"
MULTITOOL_DEFAULT = "sarif"
DOWNLOAD_TIMEOUT_ENV = "AXE_SARIF_BASELINE_DOWNLOAD_TIMEOUT"
DOWNLOAD_TIMEOUT_DEFAULT = 60.0


def load_env():
    dotenv.load_dotenv(override=False)


def multitool_command():
    raw = os.getenv(MULTITOOL_ENV, "").strip()
    if raw:
        return shlex.split(raw)
    return [MULTITOOL_DEFAULT]


def download_timeout():
    raw = os.getenv(DOWNLOAD_TIMEOUT_ENV, "").strip()
    if not raw:
        return DOWNLOAD_TIMEOUT_DEFAULT
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{DOWNLOAD_TIMEOUT_ENV} must be a number of seconds, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{DOWNLOAD_TIMEOUT_ENV} must be positive, got {raw!r}")
    return value
