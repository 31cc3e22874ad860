from .challenge import ChallengeDetector
from .forward_http_headers import HTTPHeadersProjector, project_headers

__all__ = ["ChallengeDetector", "HTTPHeadersProjector", "project_headers"]
