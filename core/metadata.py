import re
from pathlib import Path

SERVICE_NAME = "campaign-provisioner"
APP_TITLE = "Campaign Provisioner: Google Ads build-out and conversion tracking"


def _read_version() -> str:
    changelog = Path(__file__).resolve().parent.parent / "CHANGELOG.md"
    if changelog.exists():
        match = re.search(r"##\s*\[(.+?)\]", changelog.read_text())
        if match:
            return match.group(1)
    return "unknown"


VERSION = _read_version()
