"""Route guard / navigator.

Maps a URL fragment (``#/path?query``) to the view that should be shown,
applying these rules in order:

1. Unknown paths fall back to ``browse``.
2. ``create`` and ``dashboard`` need a signed-in user, else ``login``.
3. ``login`` and ``register`` send signed-in users to ``browse``.
4. ``share`` imports the ``data`` token; without one it shows
   "Invalid share link" and goes to ``browse``.

Auth redirects are silent. Resolving the same fragment in the same session
state always gives the same answer, except that a share import only creates
the test once (later resolutions report the duplicate).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qs

from abvote.domain.models import ABTest
from abvote.domain.results import Result
from abvote.service_layer.session import SessionManager
from abvote.service_layer.share_codec import SHARE_PARAM, ShareCodec

logger = logging.getLogger(__name__)

INVALID_SHARE_LINK = "Invalid share link"


class Route(str, Enum):
    """Named views."""

    BROWSE = "browse"
    LOGIN = "login"
    REGISTER = "register"
    CREATE = "create"
    DASHBOARD = "dashboard"
    SHARE = "share"


ROUTES: dict[str, Route] = {
    "/": Route.BROWSE,
    "/login": Route.LOGIN,
    "/register": Route.REGISTER,
    "/create": Route.CREATE,
    "/dashboard": Route.DASHBOARD,
    "/share": Route.SHARE,
}
PATHS: dict[Route, str] = {route: path for path, route in ROUTES.items()}

PROTECTED_ROUTES = frozenset({Route.CREATE, Route.DASHBOARD})
GUEST_ONLY_ROUTES = frozenset({Route.LOGIN, Route.REGISTER})


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a fragment.

    Attributes:
        fragment: The fragment as given.
        requested: Route the fragment's path maps to (after fallback).
        route: Route to show.
        notice: Message for the user, if any (never set for auth redirects).
        share_result: Result of the share import, for share fragments with a token.
    """

    fragment: str
    requested: Route
    route: Route
    notice: str | None = None
    share_result: Result[ABTest] | None = None

    @property
    def redirected(self) -> bool:
        return self.route is not self.requested

    @property
    def target_fragment(self) -> str:
        """Canonical fragment of the route being shown."""
        return fragment_for(self.route)


def fragment_for(route: Route) -> str:
    """Return the ``#/path`` fragment for `route`."""
    return f"#{PATHS[route]}"


def split_fragment(fragment: str) -> tuple[str, dict[str, str]]:
    """Split ``#/path?query`` into the path and its first query values."""
    body = (fragment or "").lstrip("#") or "/"
    path, _, query = body.partition("?")
    params = {
        name: values[0]
        for name, values in parse_qs(query, keep_blank_values=True).items()
    }
    return path or "/", params


class Navigator:
    """Resolves fragments against the current session."""

    def __init__(self, session: SessionManager, codec: ShareCodec) -> None:
        self.session = session
        self.codec = codec
        self.current: Resolution | None = None

    def resolve(self, fragment: str) -> Resolution:
        """Apply the routing rules to `fragment`."""
        path, params = split_fragment(fragment)
        requested = ROUTES.get(path, Route.BROWSE)
        authenticated = self.session.is_authenticated()

        if requested in PROTECTED_ROUTES and not authenticated:
            logger.debug("%s requires a session; redirecting to login", requested.value)
            return Resolution(fragment, requested, Route.LOGIN)

        if requested in GUEST_ONLY_ROUTES and authenticated:
            logger.debug("%s is for guests; redirecting to browse", requested.value)
            return Resolution(fragment, requested, Route.BROWSE)

        if requested is Route.SHARE:
            if not (token := params.get(SHARE_PARAM)):
                return Resolution(
                    fragment, requested, Route.BROWSE, notice=INVALID_SHARE_LINK
                )
            user = self.session.current_user()
            result = self.codec.import_token(token, user.id if user else None)
            return Resolution(fragment, requested, Route.SHARE, share_result=result)

        return Resolution(fragment, requested, requested)

    def navigate(self, fragment: str) -> Resolution:
        """Resolve `fragment` and remember it as the current view."""
        self.current = self.resolve(fragment)
        logger.debug(
            "Navigated to %s (shown: %s)", fragment, self.current.route.value
        )
        return self.current
