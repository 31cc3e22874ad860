"""
Detection of the upstream anti-bot interstitial ("challenge") page.
"""

from dataclasses import dataclass, field

DEFAULT_CHALLENGE_MARKERS: tuple[str, ...] = (
    "无法验证您的浏览器",
    "Vercel 安全检查点",
    "unable to verify your browser",
)


@dataclass
class ChallengeDetector:
    """
    Looks for known interstitial phrases in an HTML body.
    ASCII markers are matched case-insensitively, other markers exactly.
    """

    markers: tuple[str, ...] = field(default=DEFAULT_CHALLENGE_MARKERS)

    def __bool__(self) -> bool:
        return bool(self.markers)

    @staticmethod
    def is_html(content_type: str | None) -> bool:
        return "text/html" in (content_type or "").lower()

    def __call__(self, text: str) -> bool:
        lowered = None
        for marker in self.markers:
            if marker.isascii():
                if lowered is None:
                    lowered = text.lower()
                if marker.lower() in lowered:
                    return True
            elif marker in text:
                return True
        return False
