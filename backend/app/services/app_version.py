"""Mobile app version checks against the configured supported versions."""
from app.core.config import Settings
from app.models.device import Platform


def compare_versions(left: str, right: str) -> int:
    """Compare dotted versions numerically: -1, 0 or 1. Missing parts count as 0.

    Non-numeric parts (e.g. a "-beta" suffix) compare as 0.
    """
    def parts(version: str) -> list[int]:
        out = []
        for piece in version.strip().split("."):
            digits = ""
            for ch in piece:
                if not ch.isdigit():
                    break
                digits += ch
            out.append(int(digits) if digits else 0)
        return out

    a, b = parts(left), parts(right)
    width = max(len(a), len(b))
    a += [0] * (width - len(a))
    b += [0] * (width - len(b))
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def should_force_update(current: str, settings: Settings) -> bool:
    return compare_versions(current, settings.MOBILE_FORCE_UPDATE_VERSION) < 0


def should_update(current: str, settings: Settings) -> bool:
    return compare_versions(current, settings.MOBILE_MIN_SUPPORTED_VERSION) < 0


def download_url(platform: Platform, settings: Settings) -> str:
    if platform == Platform.IOS:
        return settings.MOBILE_IOS_DOWNLOAD_URL
    return settings.MOBILE_ANDROID_DOWNLOAD_URL
