from starlette.responses import Response

ROBOTS_TAG = "noindex, nofollow, noarchive, nosnippet, noimageindex"


def apply_private_profile_headers(response: Response, *, max_age_seconds: int) -> None:
    response.headers["Cache-Control"] = f"private, max-age={max(0, max_age_seconds)}, must-revalidate"
    response.headers["Pragma"] = "no-cache"
    response.headers["Surrogate-Control"] = "no-store"
    response.headers["X-Robots-Tag"] = ROBOTS_TAG
